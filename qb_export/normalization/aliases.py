"""Field alias table for load records.

DivertScan clients have written loads with camelCase keys, snake_case keys
and a handful of legacy names over time. Each canonical attribute lists
the keys to try in order; the first one holding a value wins. New aliases
are added here, not in the normalizer.
"""

from typing import Dict, Tuple

FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    'id': ('id', 'loadId', 'load_id'),
    'date': ('date', 'loadDate', 'load_date', 'created_at'),
    'ticket_number': ('ticketNumber', 'ticket_number', 'ticket'),
    'hauler': ('hauler', 'haulerName', 'hauler_name'),
    'truck_id': ('truckId', 'truck_id', 'vehicle'),
    'weight_tons': ('weightTons', 'weight_tons', 'net_weight_tons', 'netWeightTons'),
    'weight_lbs': ('weightLbs', 'weight_lbs', 'net_weight_lbs'),
    'material_type': ('materialType', 'material_type', 'material'),
    'carbon_saved': ('carbonSaved', 'carbon_saved', 'co2e_savings'),
    'hash': ('hash', 'sha256Hash', 'sha256_hash'),
    'project_id': ('projectId', 'project_id'),
    'project_name': ('projectName', 'project_name'),
    'notes': ('notes',),
    'status': ('status',),
}

NUMERIC_FIELDS = frozenset({'weight_tons', 'weight_lbs', 'carbon_saved'})
