from datetime import UTC, datetime

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


@pytest.fixture
def list_product():
    """Record a product and its price in the catalogue read model."""
    from ordering.projections.catalogue_products import CatalogueProduct

    def _list(product_id, price, title=None):
        current_domain.repository_for(CatalogueProduct).add(
            CatalogueProduct(
                product_id=str(product_id),
                title=title or f"Product {product_id}",
                price=str(price),
                updated_at=datetime.now(UTC),
            )
        )

    return _list
