def run():
    """
    Run before every entry point that uses the resolvers:
        application server
        worker
        shell
    """
    from loguru import logger

    from group_membership import settings
    from group_membership.common.logs import configure_logging

    configure_logging()

    logger.info(f'group membership setup complete, cache backend: {settings.CACHE_BACKEND} ✅')
