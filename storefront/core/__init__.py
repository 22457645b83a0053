"""Core configuration, database, security and cross-cutting helpers"""
