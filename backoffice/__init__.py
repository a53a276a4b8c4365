"""
Back-office de contratos administrativos e CRM
"""
__version__ = "1.0.0"
