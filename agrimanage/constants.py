"""
AgriManage - Shared Constants
Enumerations and default cost coefficients used by the calculator
"""

# =============================================================================
# Calculator Enumerations
# =============================================================================
WATER_RESOURCE_LEVELS = ('Abundant', 'Moderate', 'Scarce', 'Limited')

SOIL_TYPES = ('Fertile', 'Moderately Fertile', 'Poor', 'Sandy', 'Rich')

# =============================================================================
# Default Cost Table (Rs.)
# =============================================================================
DEFAULT_BASE_COST = 50000.0   # per acre, crops without an entry below

CROP_BASE_COSTS = {
    'rice': 52000.0,
    'maize': 38000.0,
    'tomato': 65000.0,
    'chilli': 70000.0,
    'brinjal': 55000.0,
    'okra': 48000.0,
    'potato': 90000.0,
    'onion': 75000.0,
    'carrot': 60000.0,
    'beans': 45000.0
}

WATER_COST_FACTORS = {
    'Abundant': 1.0,
    'Moderate': 1.1,
    'Limited': 1.25,
    'Scarce': 1.4
}

SOIL_COST_FACTORS = {
    'Rich': 0.9,
    'Fertile': 1.0,
    'Moderately Fertile': 1.1,
    'Sandy': 1.3,
    'Poor': 1.35
}

# Keyed by (water resources, soil type); individual pairs may be overridden
CONDITION_MULTIPLIERS = {
    (water, soil): round(w_factor * s_factor, 4)
    for water, w_factor in WATER_COST_FACTORS.items()
    for soil, s_factor in SOIL_COST_FACTORS.items()
}

# =============================================================================
# Fertilizer Requirements (kg per acre, by soil type)
# =============================================================================
FERTILIZER_RATES = {
    'Rich': 40.0,
    'Fertile': 60.0,
    'Moderately Fertile': 80.0,
    'Sandy': 110.0,
    'Poor': 120.0
}

FERTILIZER_LEVELS = {
    'Rich': 'Low',
    'Fertile': 'Low to moderate',
    'Moderately Fertile': 'Moderate',
    'Sandy': 'High',
    'Poor': 'High'
}

# =============================================================================
# Water Requirements (seasonal, mm)
# =============================================================================
DEFAULT_WATER_REQUIREMENT = 600.0

CROP_WATER_REQUIREMENTS = {
    'rice': 1200.0,
    'maize': 550.0,
    'tomato': 500.0,
    'chilli': 600.0,
    'brinjal': 650.0,
    'okra': 450.0,
    'potato': 500.0,
    'onion': 400.0,
    'carrot': 450.0,
    'beans': 350.0
}

IRRIGATION_ADVICE = {
    'Abundant': 'Standard irrigation schedule',
    'Moderate': 'Supplementary irrigation during dry spells',
    'Limited': 'Drip irrigation recommended',
    'Scarce': 'Rainwater harvesting and drip irrigation required'
}

SQUARE_METRES_PER_ACRE = 4046.86

# =============================================================================
# Report Column Mappings (attribute -> column header)
# =============================================================================
PLANT_REPORT_COLUMNS = {
    'name': 'Plant_Name',
    'date': 'Date',
    'description': 'Description',
    'climate': 'Climate',
    'soilPh': 'Soil_pH',
    'landPreparation': 'Land_Preparation',
    'fertilizers': 'Fertilizers'
}

LOCATION_REPORT_COLUMNS = {
    'province': 'Province',
    'district': 'District',
    'city': 'City',
    'latitude': 'Latitude',
    'longitude': 'Longitude',
    'areaSize': 'Area_Size',
    'soilType': 'Soil_Type',
    'irrigationType': 'Irrigation_Type'
}

# =============================================================================
# User Roles
# =============================================================================
USER_ROLES = ['user', 'farmer', 'admin']
