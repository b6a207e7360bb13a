"""
Receipts App - Yearbook Receipt Tracking

This app tracks issuance of a fixed pool of numbered receipts (yearbook
collection slips) to students and produces a printable/emailable PDF once a
receipt has been issued.

Key Features:
- Pool initialization and incremental growth with contiguous numbering
- Issue / mark-used state machine (unissued -> issued -> used)
- Advisory duplicate-name warning before issuance
- Public search by name or receipt number with autosuggest
- PDF receipt rendering onto a fixed template and email delivery

Architecture:
- Models: Receipt
- Store: ReceiptStore (ORM access + change feed)
- Services: name matching, pool management, receipt lifecycle, search,
  rendering, notification
- Views: RESTful API with a ViewSet plus public search endpoints
"""
