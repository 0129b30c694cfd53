"""
Session source for the test factories.
"""
from app.database.session_manager.db_session import Database


class LazySessionMaker:
    """
    Sessionmaker stand-in resolved at call time.

    Factories are declared at import, before conftest has called
    ``Database.init()``, so the real session maker is looked up per call.
    """

    def __call__(self):
        if Database._async_session_maker is None:
            raise RuntimeError(
                "Database not initialized. Call Database.init() in conftest first."
            )
        return Database._async_session_maker()


async_session = LazySessionMaker()
