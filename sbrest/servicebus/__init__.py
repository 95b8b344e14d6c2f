"""
Service Bus request assembly: clients, message models, addressing and errors.
"""
