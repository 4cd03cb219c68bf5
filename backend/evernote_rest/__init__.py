"""
Evernote REST — Application Package
=====================================

What: A JSON-over-HTTP bridge to the Evernote NoteStore and UserStore APIs.
How:  POST /{noteStore|userStore}/{methodName} with a JSON object whose keys
      name the operation's parameters; the response body is the operation's
      result as JSON.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Services (Evernote connection)  │  ← token + store URL per request
    ├─────────────────────────────────────┤
    │      Dispatch (locate/bind/invoke)  │  ← signature-driven calls
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
