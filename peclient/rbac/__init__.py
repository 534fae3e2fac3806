"""RBAC data types."""