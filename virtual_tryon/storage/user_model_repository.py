"""Singleton user-model collection."""

from ..models.user_model import CURRENT_USER_ID, UserModel
from .database import Database


class UserModelRepository:
    """Stores the one model image the studio works with."""

    def __init__(self, database: Database) -> None:
        self.database = database

    async def get(self) -> str | None:
        """Return the stored model image reference, if any."""
        row = self.database.run(
            lambda conn: conn.execute(
                "SELECT id, image_url FROM user_model WHERE id = ?", (CURRENT_USER_ID,)
            ).fetchone()
        )
        return UserModel(id=row["id"], image_url=row["image_url"]).image_url if row else None

    async def put(self, image_url: str) -> None:
        model = UserModel(image_url=image_url)
        self.database.run(
            lambda conn: conn.execute(
                "INSERT OR REPLACE INTO user_model (id, image_url) VALUES (?, ?)",
                (model.id, model.image_url),
            )
        )

    async def delete(self) -> None:
        self.database.run(lambda conn: conn.execute("DELETE FROM user_model WHERE id = ?", (CURRENT_USER_ID,)))
