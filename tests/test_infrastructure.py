"""
Tests for locking, logging and error envelopes.
"""

import json
import logging

import pytest

from franchise_auction.db_utils import AuctionLock, BidLock, with_lock
from franchise_auction.logger import JSONFormatter, get_logger, log_audit


class TestLocks:

    def test_locks_are_reentrant(self, app):
        with AuctionLock():
            with AuctionLock():
                with BidLock():
                    with BidLock():
                        pass

    def test_auction_lock_after_bid_lock_is_refused(self, app):
        with BidLock():
            with pytest.raises(RuntimeError):
                with AuctionLock():
                    pass

        # Released cleanly; the correct order still works
        with AuctionLock(), BidLock():
            pass

    def test_with_lock_decorator(self, app):
        @with_lock(AuctionLock)
        def guarded(value):
            return value * 2

        assert guarded(21) == 42


class TestLogging:

    def test_module_loggers_nest_under_package(self):
        assert get_logger('franchise_auction.services.x').name == 'franchise_auction.services.x'
        assert get_logger('scripts.tool').name == 'franchise_auction.scripts.tool'

    def test_audit_record(self, app, caplog):
        caplog.set_level(logging.INFO, logger='franchise_auction')

        log_audit('wallet_adjusted', 'team', 3, {'delta': -500})

        record = caplog.records[-1]
        assert record.name == 'franchise_auction.audit'
        assert record.audit == {
            'action': 'wallet_adjusted',
            'entity_type': 'team',
            'entity_id': 3,
            'details': {'delta': -500},
        }
        assert '"delta": -500' in record.getMessage()

    def test_json_formatter(self, caplog):
        caplog.set_level(logging.INFO, logger='franchise_auction')
        log_audit('player_sold', 'player', 7)

        data = json.loads(JSONFormatter().format(caplog.records[-1]))

        assert data['level'] == 'INFO'
        assert data['audit']['action'] == 'player_sold'
        assert data['request_id'] == '-'


class TestErrorEnvelope:

    def test_unknown_route(self, client):
        response = client.get('/api/nowhere')

        assert response.status_code == 404
        assert response.get_json() == {'success': False, 'error': 'Resource not found'}

    def test_wrong_method(self, client):
        assert client.delete('/api/auction/state').status_code == 405

    def test_malformed_body(self, auth_client):
        response = auth_client.post('/api/bid', data='not json', content_type='application/json')

        assert response.status_code == 400
        assert response.get_json()['success'] is False
