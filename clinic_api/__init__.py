"""
Clinic Management API

A FastAPI service for running a clinic: accounts with admin approval,
appointment booking against a fixed slot catalog, prescriptions, medical
records, pharmacy inventory, and dashboard and report rollups. Every
request is authorized through a single ordered policy table.
"""

__version__ = "1.0.0"
