import structlog
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import BadRequestError
from app.core.security import create_access_token, get_password_hash, verify_password
from app.db.models.user import User
from app.schemas import LoginRequest, SignupRequest

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid credentials"
IDENTIFIER_TAKEN = "Username or email is already taken"


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def signup(self, data: SignupRequest) -> str:
        """Create an account and return its access token"""
        taken = self.db.query(User.id).filter(
            or_(User.username == data.username, User.email == data.email)
        ).first()
        if taken:
            raise BadRequestError(IDENTIFIER_TAKEN)

        user = User(
            firstname=data.firstname,
            lastname=data.lastname,
            username=data.username,
            email=data.email,
            password=get_password_hash(data.password),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise BadRequestError(IDENTIFIER_TAKEN)
        self.db.refresh(user)

        logger.info("User signed up", user_id=user.id, username=user.username)
        return create_access_token(user.id)

    def login(self, data: LoginRequest) -> str:
        identifier = data.email_or_username.strip()
        user = self.db.query(User).filter(
            or_(User.email == identifier, User.username == identifier)
        ).first()

        # Same answer for unknown accounts and wrong passwords
        if not user or not verify_password(data.password, user.password):
            raise BadRequestError(INVALID_CREDENTIALS)

        return create_access_token(user.id)
