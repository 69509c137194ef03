"""User persistence used by the auth flows: lookups, writes and refresh-token swaps."""

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.models.user import User


class UserStore:
    """
    Credential store backed by a SQLAlchemy session.

    Writes commit immediately; each auth operation is one short transaction.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _commit(self) -> None:
        """Commit, or roll back and re-raise so the session stays usable."""
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def find_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email.strip().lower())
        return self.session.execute(stmt).scalars().first()

    def find_by_id(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def list_all(self) -> list[User]:
        return list(self.session.execute(select(User).order_by(User.id)).scalars())

    def create(self, *, email: str, password_hash: str, name: str, role: str = "user") -> User:
        """Insert a user and commit. IntegrityError (duplicate email) propagates after rollback."""
        user = User(email=email, password_hash=password_hash, name=name, role=role)
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        return user

    def save(self, user: User) -> User:
        """Persist mutated fields of user."""
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        return user

    def delete(self, user: User) -> None:
        self.session.delete(user)
        self._commit()

    def set_refresh_token(self, user_id: int, refresh_token: str | None) -> None:
        """Overwrite the stored refresh token unconditionally (login, logout)."""
        self.session.execute(
            update(User).where(User.id == user_id).values(refresh_token=refresh_token)
        )
        self._commit()

    def swap_refresh_token(self, user_id: int, expected: str, new: str) -> bool:
        """
        Replace the stored refresh token only if it still equals expected.

        Returns False when another request rotated it first; the caller must
        treat the presented token as superseded.
        """
        result = self.session.execute(
            update(User)
            .where(User.id == user_id, User.refresh_token == expected)
            .values(refresh_token=new)
            .execution_options(synchronize_session=False)
        )
        self._commit()
        return result.rowcount == 1
