"""
argeo_shared — shared configuration, constants, schema and models for argeo.

Usage:
    from argeo_shared.config import settings
    from argeo_shared.db import get_duckdb_connection
    from argeo_shared.schema import apply_schema
    from argeo_shared.models.geography import Country, Subdivision, Locality
    from argeo_shared.constants import CABA_PROVINCE_ID, SUBDIVISION_TYPE_MAP
"""

__version__ = "0.1.0"
