"""
Package marker for the customer service.
It groups the HTTP layer, the stored-procedure data access and shared helpers under one import path.
Most functionality lives in the sibling packages; this file intentionally stays lightweight.
"""
