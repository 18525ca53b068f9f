from sqlalchemy.exc import SQLAlchemyError
from ..errors import RecordNotFound, StoreUnavailable
from ..models import db, Partner, Product, Claim

DEFAULT_PRICE = 49
FREE_TIERS = ('gold', 'premium')


def effective_price(price, tier: str) -> int:
    if tier in FREE_TIERS:
        return 0
    return price or DEFAULT_PRICE


def list_partners() -> list[dict]:
    try:
        return [p.to_dict() for p in Partner.query.order_by(Partner.id).all()]
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreUnavailable.from_exc(e) from e


def get_partner(partner_id: int) -> dict:
    try:
        partner = db.session.get(Partner, partner_id)
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreUnavailable.from_exc(e) from e
    if partner is None:
        raise RecordNotFound('Unknown partner.')
    return partner.to_dict()


def list_products(tier: str) -> list[dict]:
    try:
        products = Product.query.order_by(Product.id).all()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreUnavailable.from_exc(e) from e
    return [
        {
            'id': p.id,
            'name': p.name,
            'description': p.description,
            'image': p.image,
            'price': p.price or DEFAULT_PRICE,
            'effective_price': effective_price(p.price, tier),
            'free': tier in FREE_TIERS,
        }
        for p in products
    ]


def claim_product(tag_id: str, product_id: int, tier: str) -> dict:
    """Record a pending claim; gold and premium holders pay nothing."""
    try:
        product = db.session.get(Product, product_id)
        if product is None:
            raise RecordNotFound('Unknown product.')
        claim = Claim(
            tag_id=tag_id,
            product_id=product.id,
            price_paid=effective_price(product.price, tier),
            status='pending',
        )
        db.session.add(claim)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreUnavailable.from_exc(e) from e
    return {
        'id': claim.id,
        'product_id': claim.product_id,
        'price_paid': claim.price_paid,
        'free': claim.price_paid == 0,
        'status': claim.status,
    }
