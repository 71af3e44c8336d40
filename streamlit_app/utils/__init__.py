"""
Utility modules for the Streamlit frontend.

This package contains:
- api_client: Backend API communication
- session: Signed-in user management
- state: Session state management helpers
"""
