# =============================================================================
# AgriManage Backend
# models.py - Database Models
#
# SQLAlchemy ORM models for the application database.
# Plants own Diseases, Locations own Crops, Users own their Calculations.
# =============================================================================

from datetime import datetime, timezone

from sqlalchemy import event
from sqlalchemy.orm import validates

from agrimanage.extensions import db
from agrimanage.errors import PersistenceError, ValidationError
from agrimanage.services.normalize import (
    normalize_list,
    coerce_float,
    parse_date,
    parse_area_size,
    format_area_size,
)


def _utcnow():
    return datetime.now(timezone.utc)


def _isoformat(value):
    return value.isoformat() if value else None


class User(db.Model):
    """
    User model for authentication and authorization.

    Stores user credentials, profile information, and account status.
    Related to Calculation through one-to-many relationship.
    """
    __tablename__ = 'users'

    # Primary Key
    id = db.Column(db.Integer, primary_key=True)

    # Authentication Fields
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # Profile Fields
    first_name = db.Column(db.String(50), nullable=True)
    last_name = db.Column(db.String(50), nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    photo_url = db.Column(db.String(500), nullable=True)

    # Account Status
    is_active = db.Column(db.Boolean, default=True)
    role = db.Column(db.String(20), default='user')  # 'user', 'farmer' or 'admin'

    # Timestamps
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)
    last_login = db.Column(db.DateTime, nullable=True)

    # Calculations are an audit trail; a user who has any cannot be deleted
    calculations = db.relationship(
        'Calculation',
        backref='user',
        lazy='dynamic'
    )

    def to_dict(self, include_email=True):
        """
        Serialize user object to dictionary for API responses.

        Args:
            include_email: Whether to include email in response (privacy)

        Returns:
            dict: User data dictionary
        """
        data = {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'full_name': f"{self.first_name or ''} {self.last_name or ''}".strip(),
            'phone': self.phone,
            'photo_url': self.photo_url,
            'role': self.role,
            'is_active': self.is_active,
            'created_at': _isoformat(self.created_at),
            'last_login': _isoformat(self.last_login)
        }

        if include_email:
            data['email'] = self.email

        return data

    def __repr__(self):
        return f'<User {self.email}>'


class Plant(db.Model):
    """
    Plant model: a crop species with its cultivation metadata.

    Diseases reference a plant through Disease.plant_id.
    """
    __tablename__ = 'plants'

    # API field name -> column attribute
    API_FIELDS = {
        'name': 'name',
        'description': 'description',
        'climate': 'climate',
        'soilPh': 'soil_ph',
        'landPreparation': 'land_preparation',
        'fertilizers': 'fertilizers',
        'imageUrl': 'image_url',
        'date': 'date',
    }
    REQUIRED_FIELDS = ('name',)
    STRUCTURED_FIELDS = ('fertilizers',)

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    climate = db.Column(db.String(200), nullable=True)
    soil_ph = db.Column(db.String(50), nullable=True)
    land_preparation = db.Column(db.Text, nullable=True)

    # Ordered list of fertilizer names
    fertilizers = db.Column(db.JSON, nullable=False, default=list)

    image_url = db.Column(db.String(500), nullable=True)
    date = db.Column(db.Date, nullable=True, default=lambda: _utcnow().date())

    created_at = db.Column(db.DateTime, default=_utcnow)

    @validates('fertilizers')
    def validate_fertilizers(self, key, value):
        return normalize_list(value, field='fertilizers')

    @validates('date')
    def validate_date(self, key, value):
        return parse_date(value, field='date')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'climate': self.climate,
            'soilPh': self.soil_ph,
            'landPreparation': self.land_preparation,
            'fertilizers': list(self.fertilizers or []),
            'imageUrl': self.image_url,
            'date': _isoformat(self.date),
            'createdAt': _isoformat(self.created_at)
        }

    def __repr__(self):
        return f'<Plant {self.name}>'


class Disease(db.Model):
    """
    Disease model: a plant-affecting condition, child of a Plant.

    The plant reference is fixed at creation; updates replace the
    descriptive fields only.
    """
    __tablename__ = 'diseases'

    API_FIELDS = {
        'name': 'name',
        'causalAgent': 'causal_agent',
        'diseaseTransmission': 'disease_transmission',
        'diseaseSymptoms': 'disease_symptoms',
        'control': 'control',
        'fertilizers': 'fertilizers',
        'imageUrl': 'image_url',
        'plantId': 'plant_id',
    }
    REQUIRED_FIELDS = ('name', 'plantId')
    IMMUTABLE_FIELDS = ('plantId',)
    STRUCTURED_FIELDS = ('fertilizers',)

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(100), nullable=False)
    causal_agent = db.Column(db.String(200), nullable=True)
    disease_transmission = db.Column(db.Text, nullable=True)
    disease_symptoms = db.Column(db.Text, nullable=True)
    control = db.Column(db.Text, nullable=True)
    fertilizers = db.Column(db.JSON, nullable=False, default=list)
    image_url = db.Column(db.String(500), nullable=True)

    plant_id = db.Column(
        db.Integer,
        db.ForeignKey('plants.id'),
        nullable=False,
        index=True
    )

    created_at = db.Column(db.DateTime, default=_utcnow)

    @validates('fertilizers')
    def validate_fertilizers(self, key, value):
        return normalize_list(value, field='fertilizers')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'causalAgent': self.causal_agent,
            'diseaseTransmission': self.disease_transmission,
            'diseaseSymptoms': self.disease_symptoms,
            'control': self.control,
            'fertilizers': list(self.fertilizers or []),
            'imageUrl': self.image_url,
            'plantId': self.plant_id,
            'createdAt': _isoformat(self.created_at)
        }

    def __repr__(self):
        return f'<Disease {self.id}: {self.name}>'


class Location(db.Model):
    """
    Location model for an agricultural site.

    The free-text area size is split into area_value/area_unit whenever it
    is written, so crop allocation never has to parse text at read time.
    """
    __tablename__ = 'locations'

    API_FIELDS = {
        'province': 'province',
        'district': 'district',
        'city': 'city',
        'latitude': 'latitude',
        'longitude': 'longitude',
        'areaSize': 'area_size',
        'soilType': 'soil_type',
        'irrigationType': 'irrigation_type',
    }
    REQUIRED_FIELDS = ('province', 'district', 'city', 'areaSize')
    STRUCTURED_FIELDS = ('areaSize',)

    id = db.Column(db.Integer, primary_key=True)

    province = db.Column(db.String(100), nullable=False)
    district = db.Column(db.String(100), nullable=False)
    city = db.Column(db.String(100), nullable=False, index=True)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)

    # Display text plus its structured form
    area_size = db.Column(db.String(100), nullable=True)
    area_value = db.Column(db.Float, nullable=True)
    area_unit = db.Column(db.String(50), nullable=True)

    soil_type = db.Column(db.String(100), nullable=True)
    irrigation_type = db.Column(db.String(100), nullable=True)

    created_at = db.Column(db.DateTime, default=_utcnow)

    @validates('latitude')
    def validate_latitude(self, key, value):
        return coerce_float(value, 'latitude', minimum=-90, maximum=90)

    @validates('longitude')
    def validate_longitude(self, key, value):
        return coerce_float(value, 'longitude', minimum=-180, maximum=180)

    @validates('area_size')
    def validate_area_size(self, key, value):
        magnitude, unit = parse_area_size(value)
        self.area_value = magnitude
        self.area_unit = unit or None
        if isinstance(value, dict) or isinstance(value, (int, float)):
            return format_area_size(magnitude, unit)
        return str(value).strip() if value is not None else None

    def to_dict(self):
        return {
            'id': self.id,
            'province': self.province,
            'district': self.district,
            'city': self.city,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'areaSize': self.area_size,
            'areaValue': self.area_value,
            'areaUnit': self.area_unit,
            'soilType': self.soil_type,
            'irrigationType': self.irrigation_type,
            'createdAt': _isoformat(self.created_at)
        }

    def __repr__(self):
        return f'<Location {self.city}>'


class Crop(db.Model):
    """Crop model: an allocation of part of a Location's area to one crop."""
    __tablename__ = 'crops'

    API_FIELDS = {
        'locationId': 'location_id',
        'cropType': 'crop_type',
        'allocatedArea': 'allocated_area',
    }
    REQUIRED_FIELDS = ('locationId', 'cropType', 'allocatedArea')
    IMMUTABLE_FIELDS = ('locationId',)

    id = db.Column(db.Integer, primary_key=True)

    location_id = db.Column(
        db.Integer,
        db.ForeignKey('locations.id'),
        nullable=False,
        index=True
    )
    crop_type = db.Column(db.String(100), nullable=False)
    allocated_area = db.Column(db.Float, nullable=False)

    created_at = db.Column(db.DateTime, default=_utcnow)

    @validates('allocated_area')
    def validate_allocated_area(self, key, value):
        area = coerce_float(value, 'allocatedArea', positive=True)
        if area is None:
            raise ValidationError('allocatedArea is required', details={'field': 'allocatedArea'})
        return area

    def to_dict(self):
        return {
            'id': self.id,
            'locationId': self.location_id,
            'cropType': self.crop_type,
            'allocatedArea': self.allocated_area,
            'createdAt': _isoformat(self.created_at)
        }

    def __repr__(self):
        return f'<Crop {self.id}: {self.crop_type}>'


class Calculation(db.Model):
    """
    Calculation model: the audit record of one cost-estimation run.

    Records are written once and never modified; a user's history is the
    list of their calculations in creation order.
    """
    __tablename__ = 'calculations'

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(
        db.Integer,
        db.ForeignKey('users.id'),
        nullable=False,
        index=True
    )

    # Request
    crop = db.Column(db.String(100), nullable=False)
    area = db.Column(db.Float, nullable=False)
    water_resources = db.Column(db.String(20), nullable=False)
    soil_type = db.Column(db.String(30), nullable=False)

    # Result
    estimated_cost = db.Column(db.Float, nullable=False)
    fertilizer_needs = db.Column(db.String(255), nullable=False)
    water_needs = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, default=_utcnow, index=True)

    __table_args__ = (
        db.Index('idx_calculation_user_created', 'user_id', 'created_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'crop': self.crop,
            'area': self.area,
            'waterResources': self.water_resources,
            'soilType': self.soil_type,
            'estimatedCost': self.estimated_cost,
            'fertilizerNeeds': self.fertilizer_needs,
            'waterNeeds': self.water_needs,
            'createdAt': _isoformat(self.created_at)
        }

    def __repr__(self):
        return f'<Calculation {self.id}: {self.crop} x {self.area}>'


@event.listens_for(Calculation, 'before_update')
def reject_calculation_update(mapper, connection, target):
    raise PersistenceError('Calculations are immutable once created')
