"""
cabinetslots - appointment availability and cabinet/doctor allocation
for a two-cabinet dental clinic.
"""

__version__ = "0.1.0"
