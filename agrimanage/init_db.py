# =============================================================================
# AgriManage Backend
# init_db.py - Database Initialization Script
#
# Run this script to initialize the database with tables and seed data.
# Usage: python -m agrimanage.init_db [--reset]
# =============================================================================

import sys

from agrimanage.app import create_app
from agrimanage.extensions import db, bcrypt
from agrimanage.models import User, Plant, Disease

SAMPLE_PLANTS = [
    {
        'name': 'Rice',
        'description': 'Staple cereal grown in flooded paddy fields.',
        'climate': 'Hot and humid, 20-35 C',
        'soil_ph': '5.5 - 6.5',
        'land_preparation': 'Plough, puddle and level the field before transplanting.',
        'fertilizers': 'Urea',
        'diseases': [
            {
                'name': 'Blast',
                'causal_agent': 'Magnaporthe oryzae',
                'disease_symptoms': 'Spindle-shaped lesions with grey centres on leaves.',
                'control': 'Resistant varieties and balanced nitrogen application.'
            }
        ]
    },
    {
        'name': 'Tomato',
        'description': 'Warm season vegetable crop.',
        'climate': 'Warm, 18-27 C',
        'soil_ph': '6.0 - 6.8',
        'land_preparation': 'Deep ploughing with well rotted manure.',
        'fertilizers': ['Compost', 'NPK 10-26-26'],
        'diseases': [
            {
                'name': 'Early Blight',
                'causal_agent': 'Alternaria solani',
                'disease_symptoms': 'Dark concentric rings on older leaves.',
                'control': 'Crop rotation and copper based fungicides.'
            }
        ]
    },
    {
        'name': 'Chilli',
        'description': 'Spice crop grown for green and dry pods.',
        'climate': 'Warm, 20-30 C',
        'soil_ph': '6.0 - 7.0',
        'land_preparation': 'Raised beds with good drainage.',
        'fertilizers': ['Urea', 'Muriate of Potash'],
        'diseases': []
    }
]


def seed_admin(app):
    """Create the default admin account if it does not exist."""
    email = app.config['ADMIN_EMAIL']
    admin = User.query.filter_by(email=email).first()

    if admin:
        print("✓ Admin user already exists")
        return admin

    admin = User(
        email=email,
        password_hash=bcrypt.generate_password_hash(app.config['ADMIN_PASSWORD']).decode('utf-8'),
        first_name='Admin',
        last_name='User',
        role='admin',
        is_active=True
    )
    db.session.add(admin)
    print(f"✓ Admin user created (email: {email})")
    return admin


def seed_plants():
    """Add the sample plants and their diseases that are not present yet."""
    for sample in SAMPLE_PLANTS:
        fields = {key: value for key, value in sample.items() if key != 'diseases'}

        if Plant.query.filter_by(name=fields['name']).first():
            print(f"✓ Plant '{fields['name']}' already exists")
            continue

        plant = Plant(**fields)
        db.session.add(plant)
        db.session.flush()

        for disease in sample['diseases']:
            db.session.add(Disease(plant_id=plant.id, **disease))

        print(f"✓ Plant '{fields['name']}' added")


def init_database(app=None):
    """
    Initialize the database with tables and seed data.

    Creates all tables, the default admin user and the sample plants.
    """
    app = app or create_app()

    with app.app_context():
        db.create_all()
        print("✓ Database tables created successfully")

        seed_admin(app)
        seed_plants()

        db.session.commit()

        print("\n" + "=" * 50)
        print("Database initialization completed successfully!")
        print("=" * 50)
        print("\n⚠️  Please change the admin password in production!")


def reset_database(app=None, confirm=None):
    """
    Drop all tables and reinitialize the database.

    WARNING: This will delete all data!
    """
    app = app or create_app()

    if confirm is None:
        confirm = input("⚠️  This will DELETE ALL DATA. Type 'yes' to confirm: ")

    if confirm.lower() != 'yes':
        print("Operation cancelled")
        return

    with app.app_context():
        db.drop_all()
        print("✓ All tables dropped")

    init_database(app)


if __name__ == '__main__':
    if len(sys.argv) > 1 and sys.argv[1] == '--reset':
        reset_database()
    else:
        init_database()
