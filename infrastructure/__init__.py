"""Adapters for the hosted backend (Postgres, Auth, Storage)"""
