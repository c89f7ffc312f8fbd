def load_env_file() -> bool:
    """Load environment variables from a local .env file if not already set.

    WHAT:
        Loads variables from .env into os.environ.
        Does NOT overwrite variables that are already exported.
    WHY:
        Lets developers point trendlens at a local sqlite/postgres store
        without touching their shell environment.

    Returns:
        True when a .env file was found and read.
    """
    import logging
    from dotenv import load_dotenv

    logger = logging.getLogger(__name__)

    loaded = load_dotenv(override=False)

    if loaded:
        logger.info("Loaded local .env file (existing variables were NOT overwritten)")
    else:
        logger.debug("No local .env file found or loaded")
    return loaded
