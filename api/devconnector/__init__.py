"""DevConnector API: developer profiles service and client state."""
