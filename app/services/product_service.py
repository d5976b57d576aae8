# app/services/product_service.py
from collections import defaultdict

from sqlmodel import Session

from app.core.errors import NotFound
from app.models.product import Product, ProductOption
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductOptionRead, ProductRead


class ProductService:
    """
    Read-side catalog logic.

    Responsibilities:
      - load a product together with its option list in one call
      - shape rows into ProductRead (the catalog contract)
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    @staticmethod
    def _to_read(product: Product, options: list[ProductOption]) -> ProductRead:
        return ProductRead(
            id=product.id,
            product_name=product.product_name,
            brand_name=product.brand_name,
            category_name=product.category_name,
            description=product.description,
            option_type=product.option_type,
            image_ref=product.small_image_file1,
            options=[
                ProductOptionRead(
                    option=opt.option,
                    price=opt.price,
                    amount_in_stock=opt.amount_in_stock,
                )
                for opt in options
            ],
        )

    def get_product(self, session: Session, product_id: int) -> ProductRead:
        """
        Get a product and all of its options.

        Raises:
            NotFound: if the product does not exist.
        """
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise NotFound(f"Product with id#{product_id} not found")
        options = self.repo.list_options_for_product(session, product_id)
        return self._to_read(product, options)

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[ProductRead]:
        """List products with their options (one options query for the page)."""
        products = self.repo.list(session, skip=skip, limit=limit)
        options_by_product: dict[int, list[ProductOption]] = defaultdict(list)
        for opt in self.repo.list_options_for_products(
            session, [p.id for p in products]
        ):
            options_by_product[opt.product_id].append(opt)
        return [self._to_read(p, options_by_product[p.id]) for p in products]
