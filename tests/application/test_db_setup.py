"""Tests for schema management helpers under the default memory configuration."""

from storefront.domain import storefront
from storefront.utils.db import drop_db, relational_providers, setup_db


class TestSchemaHelpers:
    def test_memory_configuration_has_no_relational_provider(self):
        assert relational_providers(storefront) == []

    def test_setup_and_drop_are_no_ops(self, ledger, stock_product):
        stock_product("P1", 3)

        assert setup_db(storefront) == []
        assert drop_db(storefront) == []
        assert ledger.available("P1") == 3
