from django.dispatch import Signal

# Sent after every committed write with the full ordered snapshot.
# Receivers get ``receipts`` (list of Receipt) as a keyword argument.
receipts_changed = Signal()
