# app/services/user_service.py
from sqlmodel import Session

from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.user_repo import UserRepository


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - expose the authenticated profile
      - remove an account together with everything it owns
    """

    def __init__(self, repo: UserRepository, cart_repo: CartRepository):
        self.repo = repo
        self.cart_repo = cart_repo

    def get_me(self, current_user: User) -> User:
        """Return the current authenticated user."""
        return current_user

    def delete_me(self, session: Session, current_user: User) -> None:
        """
        Delete the caller's account.

        Cart items are destroyed first since they reference the user row.
        """
        self.cart_repo.clear_user_cart(session, current_user.id)
        self.repo.delete(session, current_user)
