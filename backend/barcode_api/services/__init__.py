"""
Services Module
Business logic layer for the application.

Services contain the lookup coordination and validation logic.
They are called by API endpoints and keep the controllers thin.
"""
