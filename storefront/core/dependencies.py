"""
Request dependencies for the external clients built at startup
"""

from fastapi import Request

def get_payment_gateway(request: Request):
    return request.app.state.payment_gateway

def get_clerk(request: Request):
    return request.app.state.clerk

def get_storage(request: Request):
    return request.app.state.storage
