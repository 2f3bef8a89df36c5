"""
SmartBiz Business Parameters
----------------------------
Single source of truth for the constants behind the P&L model, the canned
history, the spreadsheet label table and the simulator controls.

Usage:
    from business_parameters import DEFAULTS, COSTS, HISTORY, METRIC_LABELS
"""

# =============================================================================
# 0. DEFAULT OPERATING METRICS
# =============================================================================
DEFAULTS = {
    "inventory_level": 5000,          # Units
    "material_cost_per_unit": 15.50,  # $ per unit sold
    "labor_efficiency": 12,           # Units produced per labor-hour
    "labor_cost_per_hour": 25.00,     # $ per hour
    "sales_volume": 4200,             # Units
    "sales_price": 45.00,             # $ per unit
    "marketing_spend": 15000,         # $ per period
}

# =============================================================================
# 1. COST MODEL
# =============================================================================
COSTS = {
    # Charged per unit of inventory held above the period's sales volume
    "HOLDING_COST_PER_UNIT": 2.5,
}

# =============================================================================
# 2. HISTORICAL VARIATIONS (last six months)
# =============================================================================
# month -> overrides applied on top of DEFAULTS
HISTORY = [
    ("Jan", {"sales_volume": 3800, "material_cost_per_unit": 14.00}),
    ("Feb", {"sales_volume": 3900, "material_cost_per_unit": 14.20}),
    ("Mar", {"sales_volume": 4100, "material_cost_per_unit": 14.50}),
    ("Apr", {"sales_volume": 4050, "material_cost_per_unit": 15.00}),
    ("May", {"sales_volume": 4300, "material_cost_per_unit": 15.20}),
    ("Jun", {"sales_volume": 4150, "material_cost_per_unit": 15.40}),
]

CURRENT_PERIOD_LABEL = "Current"

# =============================================================================
# 3. SPREADSHEET IMPORT
# =============================================================================
# Row label as typed in the sheet -> BusinessMetrics field
METRIC_LABELS = {
    "Inventory Level": "inventory_level",
    "Material Cost Per Unit": "material_cost_per_unit",
    "Labor Efficiency": "labor_efficiency",
    "Labor Cost Per Hour": "labor_cost_per_hour",
    "Sales Volume": "sales_volume",
    "Sales Price": "sales_price",
    "Marketing Spend": "marketing_spend",
}

# Accepted names for the label column, checked in order
KEY_COLUMNS = ["Metric", "Parameter", "Name", "Indicator"]
VALUE_COLUMN = "Value"

SUPPORTED_UPLOAD_TYPES = ["xlsx", "xls", "csv"]
TEMPLATE_FILENAME = "smartbiz_template.csv"
REPORT_FILENAME = "smartbiz_pnl_snapshot.xlsx"

# =============================================================================
# 4. DATA ENTRY FORM
# =============================================================================
# (group title, [(field, label, step)])
FORM_GROUPS = [
    ("Inventory & Cost", [
        ("inventory_level", "Inventory Level (Units)", 100.0),
        ("material_cost_per_unit", "Material Cost / Unit ($)", 0.5),
    ]),
    ("Efficiency", [
        ("labor_efficiency", "Labor Efficiency (Units/Hr)", 1.0),
        ("labor_cost_per_hour", "Labor Cost / Hour ($)", 0.5),
    ]),
    ("Sales & Marketing", [
        ("sales_volume", "Sales Volume (Units)", 100.0),
        ("sales_price", "Sales Price ($)", 0.5),
        ("marketing_spend", "Marketing Spend ($)", 500.0),
    ]),
]

# =============================================================================
# 5. DECISION SIMULATOR
# =============================================================================
# field -> (label, min, max, step)
SIMULATOR_SLIDERS = {
    "sales_price": ("Sales Price ($)", 10.0, 100.0, 0.5),
    "marketing_spend": ("Marketing Spend ($)", 5000.0, 50000.0, 500.0),
    "inventory_level": ("Inventory Level (Units)", 1000.0, 10000.0, 100.0),
}

# =============================================================================
# 6. AI GATEWAY
# =============================================================================
AI = {
    "TEXT_MODEL": "gpt-4o-mini",
    "IMAGE_MODEL": "gpt-image-1",
    "TIMEOUT_SECONDS": 60.0,
    "DEFAULT_IMAGE_MIME": "image/jpeg",
}
