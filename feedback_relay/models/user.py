from werkzeug.security import generate_password_hash, check_password_hash
from feedback_relay.extensions import db
from ._helpers import new_id

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    username = db.Column(db.Text, nullable=False, unique=True)
    password = db.Column(db.Text, nullable=False)  # werkzeug hash, never the raw value

    # helpers
    def set_password(self, password: str) -> None:
        self.password = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password, password)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"
