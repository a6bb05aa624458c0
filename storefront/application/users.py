import logging
from typing import Optional
from sqlalchemy.orm import Session
from storefront.auth_local import hash_password, verify_password
from storefront.domain.models import User, UserRole
from storefront.domain.exceptions import AuthException

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def authenticate(self, email: str, password: str) -> User:
        user = self.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.warning("Failed login attempt", extra={"extra_fields": {"email": email}})
            raise AuthException("Invalid email or password")
        return user

    def upsert(self, email: str, password: str, name: Optional[str] = None, role: UserRole = UserRole.USER) -> User:
        """Create the user, or reset password and role when the email already exists."""
        user = self.get_by_email(email)
        if user is None:
            user = User(email=email.strip().lower())
            self.db.add(user)
        user.name = name or user.name or user.email.split("@")[0]
        user.role = role.value
        user.password_hash = hash_password(password)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user.email} saved", extra={"extra_fields": {"role": user.role}})
        return user
