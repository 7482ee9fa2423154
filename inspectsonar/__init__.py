"""
inspectsonar - InspectCode reports as SonarQube rules and issues
"""

__version__ = "0.1.0"
__logo__ = "🔎"
