"""IDMC registration package.

Organized by feature modules (registrations, checkin, invoices, ...) with a
thin Flask controller layer over service and Firestore repository layers.
"""
