"""
HTTP API Layer.

    - routes.py: conversion, upload, voice, health and metrics endpoints
    - schemas.py: Pydantic request/response models
    - dependencies.py: app.state service providers
"""
