# Users relate to groups through memberships, never through reference fields
USER_ENTITY_TYPE = 'user'
