"""Orchestrator API client, data types and errors."""