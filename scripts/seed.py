import os, sys, pathlib
# Ensure project root is on PYTHONPATH when running directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from memento import create_app
from memento.models import db, Partner, Product
from memento.services.records import RecordStore, TokenRecord
from memento.services.tokens import scan_url

PARTNERS = [
    dict(id=1, name='La Carbonara', location='Via Panisperna, 214', discount='15% OFF',
         description='Authentic Roman recipe in the heart of Monti.', rating=4.8, category='food'),
    dict(id=2, name='Jerry Thomas Speakeasy', location='Vicolo Cellini, 30', discount='Free Welcome Cocktail',
         description='Secret bar; the password is in your vault.', rating=4.9, category='drink'),
    dict(id=3, name='Antico Forno Roscioli', location='Via dei Chiavari, 34', discount='10% OFF',
         description='The most famous bakery in the city.', rating=4.7, category='food'),
]

PRODUCTS = [
    dict(id=1, name='Digital Photo Album', description='Every memory of the trip, printed.', price=49),
    dict(id=2, name='Hidden Rome Guide', description='Walks off the tourist track.', price=19),
]

TAGS = [
    TokenRecord(tag_id='RM-ALPHA-01', tier='standard'),
    TokenRecord(tag_id='RM-GOLD-01', tier='gold'),
    TokenRecord(tag_id='RM-PREMIUM-01', tier='premium'),
]

app = create_app()
with app.app_context():
    for p in PARTNERS:
        if db.session.get(Partner, p['id']) is None:
            db.session.add(Partner(**p))
    for p in PRODUCTS:
        if db.session.get(Product, p['id']) is None:
            db.session.add(Product(**p))
    db.session.commit()

    store = RecordStore()
    base = os.environ.get('BASE_URL', 'http://localhost:5000')
    for rec in TAGS:
        if store.get(rec.tag_id) is None:
            store.insert(rec)
        print('Tag URL:', scan_url(base, rec.tag_id))
