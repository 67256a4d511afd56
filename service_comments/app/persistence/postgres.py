"""
PostgreSQL persistence layer for the Comments Service.
"""

from typing import Optional, List

import asyncpg
from shared.logging import get_logger
from shared.errors import CommentAlreadyExistsError, CommentServiceException, ServiceError

from ..domain.model_id import ModelId
from ..domain.models import Comment


class PostgresCommentRepository:
    """PostgreSQL persistence layer for comments."""

    def __init__(self, dsn: str):
        self.dsn = dsn
        self.logger = get_logger("comments.persistence.postgres")
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self):
        """Start the persistence layer."""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=2,
                max_size=10,
                command_timeout=30
            )

            # Create tables if they don't exist
            await self._create_tables()

            self.logger.info("PostgreSQL persistence started")

        except Exception as e:
            self.logger.error("Failed to start PostgreSQL persistence", error=str(e))
            raise CommentServiceException("POSTGRES_START_FAILED", str(e))

    async def stop(self):
        """Stop the persistence layer."""
        if self.pool:
            await self.pool.close()
            self.logger.info("PostgreSQL persistence stopped")

    async def _create_tables(self):
        """Create database tables."""
        async with self.pool.acquire() as conn:
            # comments is append/delete only: rows are never updated in place.
            # Fields:
            # - id: storage-assigned identity
            # - model_id: canonical namespace:name:version
            # - author: username of the writer
            # - content: free text
            # - date: creation timestamp, formatted when the comment was built
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS comments (
                    id BIGSERIAL PRIMARY KEY,
                    model_id VARCHAR(512) NOT NULL,
                    author VARCHAR(255) NOT NULL,
                    content TEXT NOT NULL,
                    date VARCHAR(64) NOT NULL
                );
            """)

            await conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_comments_model_id ON comments(model_id);
            """)
            await conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_comments_author ON comments(author);
            """)

    async def save(self, comment: Comment) -> Comment:
        """Insert a comment and return it with its assigned id."""
        ModelId.parse(comment.model_id)

        try:
            async with self.pool.acquire() as conn:
                if comment.id is None:
                    row = await conn.fetchrow("""
                        INSERT INTO comments (model_id, author, content, date)
                        VALUES ($1, $2, $3, $4)
                        RETURNING id
                    """, comment.model_id, comment.author, comment.content, comment.date)
                else:
                    row = await conn.fetchrow("""
                        INSERT INTO comments (id, model_id, author, content, date)
                        VALUES ($1, $2, $3, $4, $5)
                        ON CONFLICT (id) DO NOTHING
                        RETURNING id
                    """, comment.id, comment.model_id, comment.author, comment.content, comment.date)

                    if row is None:
                        raise CommentAlreadyExistsError(
                            f"Comment with id [{comment.id}] already exists",
                            details={"comment_id": comment.id}
                        )

                    # Explicit ids bypass BIGSERIAL; keep the sequence ahead of them
                    await conn.execute("""
                        SELECT setval(pg_get_serial_sequence('comments', 'id'), GREATEST(MAX(id), 1))
                        FROM comments
                    """)

                stored = comment.with_id(row["id"])
                self.logger.info("Comment saved", comment_id=stored.id, model_id=stored.model_id)
                return stored

        except asyncpg.PostgresError as e:
            self.logger.error("Error saving comment", model_id=comment.model_id, error=str(e))
            raise ServiceError("Failed to save comment", details={"error": str(e)})

    async def delete(self, comment_id: int) -> None:
        """Delete a comment by id."""
        try:
            async with self.pool.acquire() as conn:
                await conn.execute("DELETE FROM comments WHERE id = $1", comment_id)
                self.logger.info("Comment deleted", comment_id=comment_id)

        except asyncpg.PostgresError as e:
            self.logger.error("Error deleting comment", comment_id=comment_id, error=str(e))
            raise ServiceError("Failed to delete comment", details={"error": str(e)})

    async def find_one(self, comment_id: int) -> Optional[Comment]:
        """Load a comment by id."""
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow("""
                SELECT * FROM comments WHERE id = $1
            """, comment_id)

        return self._row_to_comment(row) if row else None

    async def find_by_model_id(self, model_id: str) -> List[Comment]:
        """Load all comments on a model, oldest first."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch("""
                SELECT * FROM comments WHERE model_id = $1 ORDER BY id ASC
            """, model_id)

        return [self._row_to_comment(row) for row in rows]

    async def find_by_author(self, author: str) -> List[Comment]:
        """Load all comments written by an author, oldest first."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch("""
                SELECT * FROM comments WHERE author = $1 ORDER BY id ASC
            """, author)

        return [self._row_to_comment(row) for row in rows]

    async def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except Exception as e:
            self.logger.error("PostgreSQL health check failed", error=str(e))
            return False

    def _row_to_comment(self, row) -> Comment:
        """Convert a database row to a Comment."""
        return Comment(
            id=row["id"],
            model_id=row["model_id"],
            author=row["author"],
            content=row["content"],
            date=row["date"]
        )
