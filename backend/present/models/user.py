"""User and profile models."""
from enum import Enum
from present import db
from present.models.base import BaseModel

class UserRole(Enum):
    """User roles enumeration."""
    ADMIN = 'admin'
    INSTRUCTOR = 'instructor'
    STUDENT = 'student'

class User(BaseModel):
    """Account shared by admins, instructors and students."""

    __tablename__ = 'users'

    username = db.Column(db.String(100), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=True, index=True)
    role = db.Column(db.Enum(UserRole), nullable=False, default=UserRole.STUDENT)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Relationships
    profile = db.relationship('Profile', backref='user', uselist=False,
                              cascade='all, delete-orphan')

    @property
    def display_name(self) -> str:
        """Full name from the profile, falling back to the username."""
        if self.profile and self.profile.full_name:
            return self.profile.full_name
        return self.username

    def __repr__(self) -> str:
        return f'<User {self.username}>'

class Profile(BaseModel):
    """Personal details for a user."""

    __tablename__ = 'profiles'

    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, unique=True)
    first_name = db.Column(db.String(100), nullable=True)
    middle_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    # Staff ID for instructors, student number for students
    employee_id = db.Column(db.String(50), nullable=True, index=True)

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return ' '.join(part for part in parts if part)
