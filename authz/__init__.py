"""Role-based authorization engine for the business dashboard."""
