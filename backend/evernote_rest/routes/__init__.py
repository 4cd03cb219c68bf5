# Routes package init
"""
Evernote REST — API Routes Package
====================================

Route Inventory:
    - store.py:   POST /{noteStore|userStore}/{methodName}  (dispatch an operation)
    - health.py:  GET  /health                              (service health check)

Routes stay thin: they resolve the store handle for the request and hand it
to the Dispatcher. Errors are formatted by the global handlers in main.py.
"""
