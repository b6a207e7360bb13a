"""
Service layer unit tests for receipts app.

Tests cover:
- Pool initialization and growth
- Issue / mark-used state machine
- Duplicate detection and forced issuance
- Search and autosuggest
- Change feed subscriptions
"""

import pytest
from unittest.mock import patch
from uuid import uuid4

from apps.receipts.models import Receipt, ReceiptState
from apps.receipts.services import (
    ReceiptStore,
    SearchIndex,
    initialize_pool,
    grow_pool,
    get_pool_summary,
    check_duplicate,
    find_duplicates,
    get_receipt,
    commit_issue,
    issue_receipt,
    mark_used,
    normalize_name,
    names_match,
    name_contains,
    extract_receipt_number,
    search_receipts,
    suggest_names,
)
from apps.receipts.services.exceptions import (
    AlreadyInitializedError,
    InvalidCountError,
    InvalidIssueDataError,
    InvalidTransitionError,
    PossibleDuplicateError,
    ReceiptNotFoundError,
    ReceiptStoreError,
)


def issue(receipt, name, section='XII-B', issuer='Priya'):
    return commit_issue(
        receipt_id=receipt.id,
        student_name=name,
        section=section,
        issuing_party=issuer,
    )


# =============================================================================
# Name Matching Tests
# =============================================================================

class TestNameMatching:
    """Tests for name_matching.py functions."""

    def test_normalize_lowercases_and_trims(self):
        assert normalize_name('  Jane Doe  ') == 'jane doe'

    def test_normalize_none_is_empty(self):
        assert normalize_name(None) == ''

    def test_surrounding_whitespace_and_case_ignored(self):
        assert names_match('Jane Doe', '  jane doe  ') is True

    def test_internal_whitespace_not_collapsed(self):
        """Double spaces inside a name make it a different name."""
        assert names_match('Jane  Doe', 'Jane Doe') is False

    def test_contains_is_case_insensitive(self):
        assert name_contains('Asha Rao', 'ASH') is True
        assert name_contains('Asha Rao', 'rohan') is False


# =============================================================================
# Pool Management Tests
# =============================================================================

@pytest.mark.django_db
class TestPoolManagement:
    """Tests for pool_management.py service functions."""

    def test_initialize_creates_contiguous_numbers(self):
        receipts = initialize_pool(size=101)

        numbers = sorted(Receipt.objects.values_list('receipt_number', flat=True))
        assert numbers == list(range(1, 102))
        assert len(receipts) == 101
        assert all(r.state == ReceiptState.UNISSUED for r in receipts)

    def test_initialize_uses_default_size(self):
        initialize_pool()
        assert Receipt.objects.count() == 101

    def test_initialize_twice_fails(self):
        initialize_pool(size=3)

        with pytest.raises(AlreadyInitializedError):
            initialize_pool(size=3)

        assert Receipt.objects.count() == 3

    @pytest.mark.parametrize('size', [0, -5])
    def test_initialize_rejects_non_positive_size(self, size):
        with pytest.raises(InvalidCountError):
            initialize_pool(size=size)

        assert Receipt.objects.count() == 0

    def test_grow_appends_after_max(self):
        initialize_pool(size=10)

        new = grow_pool(count=5)

        assert [r.receipt_number for r in new] == [11, 12, 13, 14, 15]
        numbers = sorted(Receipt.objects.values_list('receipt_number', flat=True))
        assert numbers == list(range(1, 16))

    def test_grow_reads_max_from_all_rows(self):
        """Rows added out of band still move the starting point."""
        initialize_pool(size=3)
        Receipt.objects.create(receipt_number=40)

        new = grow_pool(count=2)

        assert [r.receipt_number for r in new] == [41, 42]

    def test_grow_on_empty_pool_starts_at_one(self):
        new = grow_pool(count=2)
        assert [r.receipt_number for r in new] == [1, 2]

    def test_grow_rejects_non_positive_count(self):
        initialize_pool(size=3)

        with pytest.raises(InvalidCountError):
            grow_pool(count=0)

        assert Receipt.objects.count() == 3

    def test_summary_counts_states(self, receipt_number):
        issue(receipt_number(1), 'Asha Rao')
        issue(receipt_number(2), 'Rohan Gupta')
        mark_used(receipt_id=receipt_number(2).id, used_by='Priya')

        summary = get_pool_summary()

        assert summary == {'total': 101, 'unissued': 99, 'issued': 1, 'used': 1}


# =============================================================================
# Receipt Lifecycle Tests
# =============================================================================

@pytest.mark.django_db
class TestReceiptLifecycle:
    """Tests for receipt_lifecycle.py service functions."""

    def test_commit_issue_records_issuance(self, receipt_number):
        receipt = issue(receipt_number(67), 'Asha Rao', issuer='Priya')

        receipt.refresh_from_db()
        assert receipt.state == ReceiptState.ISSUED
        assert receipt.student_name == 'Asha Rao'
        assert receipt.section == 'XII-B'
        assert receipt.issuing_party == 'Priya'
        assert receipt.issued_at is not None
        assert receipt.used_by == ''
        assert receipt.used_at is None

    def test_name_stored_verbatim(self, receipt_number):
        receipt = issue(receipt_number(3), '  asha  RAO ')
        receipt.refresh_from_db()
        assert receipt.student_name == '  asha  RAO '

    def test_issue_twice_fails_without_mutation(self, issued_receipt):
        before = Receipt.objects.get(id=issued_receipt.id)

        with pytest.raises(InvalidTransitionError):
            issue(issued_receipt, 'Somebody Else', section='XI-A', issuer='Karan')

        after = Receipt.objects.get(id=issued_receipt.id)
        assert after.student_name == before.student_name
        assert after.section == before.section
        assert after.issuing_party == before.issuing_party
        assert after.issued_at == before.issued_at
        assert after.updated_at == before.updated_at

    def test_issue_used_receipt_fails(self, issued_receipt):
        mark_used(receipt_id=issued_receipt.id, used_by='Priya')

        with pytest.raises(InvalidTransitionError):
            issue_receipt(
                receipt_id=issued_receipt.id,
                student_name='Somebody Else',
                section='XI-A',
                issuing_party='Karan',
            )

    @pytest.mark.parametrize('field', ['student_name', 'section', 'issuing_party'])
    def test_issue_rejects_blank_values(self, receipt_number, field):
        values = {
            'student_name': 'Asha Rao',
            'section': 'XII-B',
            'issuing_party': 'Priya',
        }
        values[field] = '   '

        with pytest.raises(InvalidIssueDataError):
            issue_receipt(receipt_id=receipt_number(5).id, **values)

        assert receipt_number(5).state == ReceiptState.UNISSUED

    def test_issue_unknown_receipt(self, pool):
        with pytest.raises(ReceiptNotFoundError):
            issue_receipt(
                receipt_id=uuid4(),
                student_name='Asha Rao',
                section='XII-B',
                issuing_party='Priya',
            )

    def test_get_receipt_malformed_id(self, pool):
        with pytest.raises(ReceiptNotFoundError):
            get_receipt(receipt_id='not-a-uuid')

    def test_mark_used_on_unissued_fails(self, receipt_number):
        with pytest.raises(InvalidTransitionError):
            mark_used(receipt_id=receipt_number(4).id, used_by='Priya')

        assert receipt_number(4).state == ReceiptState.UNISSUED

    def test_mark_used_on_issued_succeeds(self, issued_receipt):
        receipt = mark_used(receipt_id=issued_receipt.id, used_by='Karan')

        receipt.refresh_from_db()
        assert receipt.state == ReceiptState.USED
        assert receipt.used_by == 'Karan'
        assert receipt.used_at is not None
        # Issuance is kept
        assert receipt.student_name == 'Asha Rao'

    def test_mark_used_twice_fails(self, issued_receipt):
        mark_used(receipt_id=issued_receipt.id, used_by='Karan')

        with pytest.raises(InvalidTransitionError):
            mark_used(receipt_id=issued_receipt.id, used_by='Priya')

        assert Receipt.objects.get(id=issued_receipt.id).used_by == 'Karan'

    def test_issued_fields_present_iff_issued(self, receipt_number):
        issue(receipt_number(1), 'Asha Rao')
        issue(receipt_number(2), 'Rohan Gupta')
        mark_used(receipt_id=receipt_number(2).id, used_by='Priya')

        for receipt in Receipt.objects.all():
            gated = [receipt.student_name, receipt.section, receipt.issuing_party, receipt.issued_at]
            if receipt.state == ReceiptState.UNISSUED:
                assert not any(gated)
            else:
                assert all(gated)


# =============================================================================
# Duplicate Detection Tests
# =============================================================================

@pytest.mark.django_db
class TestDuplicateDetection:
    """Tests for duplicate-name warnings before issuance."""

    def test_duplicate_surfaces_single_match_then_forced_commit(self, receipt_number):
        issue(receipt_number(5), 'Rohan Gupta')

        with pytest.raises(PossibleDuplicateError) as exc_info:
            issue_receipt(
                receipt_id=receipt_number(9).id,
                student_name='rohan gupta',
                section='XII-A',
                issuing_party='Karan',
            )

        matches = exc_info.value.matches
        assert [m.receipt_number for m in matches] == [5]
        assert 'YB25-005' in str(exc_info.value)
        # Nothing written yet
        assert receipt_number(9).state == ReceiptState.UNISSUED

        issue_receipt(
            receipt_id=receipt_number(9).id,
            student_name='rohan gupta',
            section='XII-A',
            issuing_party='Karan',
            check_duplicates=False,
        )

        first, second = receipt_number(5), receipt_number(9)
        assert first.state == ReceiptState.ISSUED
        assert second.state == ReceiptState.ISSUED
        assert normalize_name(first.student_name) == normalize_name(second.student_name)

    def test_section_not_part_of_duplicate_key(self, receipt_number):
        issue(receipt_number(5), 'Rohan Gupta', section='XII-B')

        matches = find_duplicates(name='Rohan Gupta')

        assert len(matches) == 1

    def test_unissued_receipts_never_match(self, pool):
        assert find_duplicates(name='') == []
        assert check_duplicate(name='', receipts=pool) == []

    def test_check_duplicate_is_pure(self):
        receipts = [
            Receipt(receipt_number=1, state=ReceiptState.ISSUED, student_name='Jane Doe'),
            Receipt(receipt_number=2, state=ReceiptState.USED, student_name='  jane doe  '),
            Receipt(receipt_number=3, state=ReceiptState.ISSUED, student_name='Jane  Doe'),
            Receipt(receipt_number=4, state=ReceiptState.UNISSUED),
        ]

        matches = check_duplicate(name='JANE DOE', receipts=receipts)

        assert [r.receipt_number for r in matches] == [1, 2]

    def test_no_duplicate_issues_directly(self, receipt_number):
        issue(receipt_number(5), 'Rohan Gupta')

        receipt = issue_receipt(
            receipt_id=receipt_number(6).id,
            student_name='Asha Rao',
            section='XII-B',
            issuing_party='Priya',
        )

        assert receipt.state == ReceiptState.ISSUED

    def test_store_failure_degrades_to_no_matches(self, receipt_number):
        issue(receipt_number(5), 'Rohan Gupta')

        with patch.object(ReceiptStore, 'all', side_effect=ReceiptStoreError("down")):
            assert find_duplicates(name='Rohan Gupta') == []


# =============================================================================
# Search Tests
# =============================================================================

@pytest.mark.django_db
class TestSearch:
    """Tests for receipt_search.py."""

    def test_search_by_number(self, pool):
        results = search_receipts(query='42', by_name=False)
        assert [r.receipt_number for r in results] == [42]

    def test_search_by_missing_number(self, pool):
        assert search_receipts(query='500', by_name=False) == []

    def test_search_without_digits(self, pool):
        assert search_receipts(query='abc', by_name=False) == []

    def test_search_uses_first_digit_run(self, pool):
        """A formatted id searches by its prefix digits."""
        assert extract_receipt_number('YB25-042') == 25
        results = search_receipts(query='YB25-042', by_name=False)
        assert [r.receipt_number for r in results] == [25]

    def test_search_by_name_contains(self, receipt_number):
        issue(receipt_number(1), 'Asha Rao')
        issue(receipt_number(2), 'Ashok Kumar')
        issue(receipt_number(3), 'Rohan Gupta')

        results = search_receipts(query='ASH')

        assert [r.receipt_number for r in results] == [1, 2]

    def test_blank_query_returns_nothing(self, issued_receipt):
        assert search_receipts(query='') == []
        assert search_receipts(query='   ') == []

    def test_suggest_limits_to_five(self, receipt_number):
        for number, name in enumerate(
            ['Aarav', 'Aditi', 'Akash', 'Ananya', 'Arjun', 'Avni'], start=1
        ):
            issue(receipt_number(number), name)

        suggestions = suggest_names(partial_name='a')

        assert suggestions == ['Aarav', 'Aditi', 'Akash', 'Ananya', 'Arjun']

    def test_suggest_dedups_case_sensitively(self, receipt_number):
        issue(receipt_number(1), 'Asha Rao')
        issue(receipt_number(2), 'Asha Rao')
        issue(receipt_number(3), 'asha rao')

        assert suggest_names(partial_name='asha') == ['Asha Rao', 'asha rao']

    def test_suggest_empty_input(self, issued_receipt):
        assert suggest_names(partial_name='') == []


# =============================================================================
# Change Feed Tests
# =============================================================================

@pytest.mark.django_db
class TestChangeFeed:
    """Tests for ReceiptStore.subscribe and SearchIndex.bind."""

    def test_subscriber_receives_full_ordered_snapshot(self, django_capture_on_commit_callbacks):
        store = ReceiptStore()
        snapshots = []
        unsubscribe = store.subscribe(snapshots.append)

        try:
            with django_capture_on_commit_callbacks(execute=True):
                initialize_pool(size=3, store=store)
        finally:
            unsubscribe()

        assert len(snapshots) == 1
        assert [r.receipt_number for r in snapshots[0]] == [1, 2, 3]

    def test_no_delivery_after_unsubscribe(self, django_capture_on_commit_callbacks):
        store = ReceiptStore()
        snapshots = []
        unsubscribe = store.subscribe(snapshots.append)

        with django_capture_on_commit_callbacks(execute=True):
            receipts = initialize_pool(size=2, store=store)
        unsubscribe()

        with django_capture_on_commit_callbacks(execute=True):
            issue(receipts[0], 'Asha Rao')

        assert len(snapshots) == 1

    def test_failing_subscriber_does_not_block_others(self, django_capture_on_commit_callbacks):
        store = ReceiptStore()
        snapshots = []

        def broken(receipts):
            raise RuntimeError("subscriber crashed")

        unsubscribe_broken = store.subscribe(broken)
        unsubscribe = store.subscribe(snapshots.append)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                initialize_pool(size=2, store=store)
        finally:
            unsubscribe_broken()
            unsubscribe()

        assert len(snapshots) == 1

    def test_bound_index_replaces_snapshot(self, django_capture_on_commit_callbacks):
        store = ReceiptStore()
        with django_capture_on_commit_callbacks(execute=True):
            receipts = initialize_pool(size=3, store=store)

        index = SearchIndex(store.all())
        unsubscribe = index.bind(store)
        try:
            assert index.suggest('asha') == []

            with django_capture_on_commit_callbacks(execute=True):
                issue(receipts[1], 'Asha Rao')
        finally:
            unsubscribe()

        assert index.suggest('asha') == ['Asha Rao']
        assert [r.receipt_number for r in index.search('Asha')] == [2]
