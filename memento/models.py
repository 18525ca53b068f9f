from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func

db = SQLAlchemy()


class Activation(db.Model):
    __tablename__ = 'activations'

    tag_id = db.Column(db.String(64), primary_key=True)
    status = db.Column(db.String(16), nullable=False, default='pending')  # pending|active
    passphrase = db.Column(db.String(255))
    recovery_contact = db.Column(db.String(255))
    role = db.Column(db.String(16), nullable=False, default='user')  # user|admin
    tier = db.Column(db.String(16), nullable=False, default='standard')  # standard|gold|premium
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())
    activated_at = db.Column(db.DateTime(timezone=True))


class Partner(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    location = db.Column(db.String(255))
    discount = db.Column(db.String(128))
    description = db.Column(db.Text)
    rating = db.Column(db.Float)
    category = db.Column(db.String(32))  # food|drink|culture
    image = db.Column(db.Text)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'location': self.location,
            'discount': self.discount,
            'description': self.description,
            'rating': self.rating,
            'category': self.category,
            'image': self.image,
        }


class Product(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Integer, default=0)
    image = db.Column(db.Text)


class Memory(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    tag_id = db.Column(db.String(64), nullable=False, index=True)
    location = db.Column(db.String(255))
    content = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(16), default='note')  # note|photo
    images_urls = db.Column(db.JSON)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'location': self.location,
            'content': self.content,
            'type': self.type,
            'images': self.images_urls or [],
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Claim(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    tag_id = db.Column(db.String(64), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('product.id'), nullable=False)
    price_paid = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(16), default='pending')  # pending|shipped
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())
