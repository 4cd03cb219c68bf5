# Services package init
"""
Evernote REST — Services Layer
================================

What:  Everything between the HTTP routes and the dispatcher that knows about
       Evernote itself.

Service Inventory:
    - evernote.py: credential resolution (config + evernote-rest-* headers),
      Thrift client construction, StoreOperations handles per request
"""
