"""Admin user model"""
from printshop import db
from .base import BaseModel


class AdminUser(BaseModel):
    """Staff account allowed to use the /api/admin endpoints"""
    __tablename__ = 'admin_users'

    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    last_login_at = db.Column(db.DateTime)

    def __repr__(self):
        return f'<AdminUser {self.username}>'

    def set_password(self, password):
        from printshop.utils.auth import hash_password
        self.password_hash = hash_password(password)

    def check_password(self, password):
        from printshop.utils.auth import verify_password
        if not self.password_hash:
            return False
        return verify_password(password, self.password_hash)

    def to_dict(self):
        return super().to_dict(exclude=['password_hash'])
