from fastapi import Request

from libs.db.gateway import Database


def get_database(request: Request) -> Database:
    """
    FastAPI dependency returning the app's database gateway.
    """
    return request.app.state.database
