from decimal import Decimal
from sqlalchemy.orm import Session
from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.data.transaction import atomic
from app.domain.errors import ValidationError, InsufficientStock, EmptyCart, NotFound
from app.domain.schemas import CartOut, CartItemOut, UpdateCartIn
from app.repos.cart_repo import CartRepo
from app.repos.product_repo import ProductRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)

class CartService:
    """
    Prosta implementacja cqrs i proste use case dla domeny cart
    commands (add, remove, update) modyfikuja stan
    query (get) tylko odczyt
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query - odczyt, bez lockow (snapshot moze byc nieaktualny wzgledem cen)
    def get_cart(self, user_id: int) -> CartOut:
        cart = self.repo.get_cart_by_user(user_id)

        if not cart:
            return CartOut()

        items = self.repo.get_cart_items(cart.id)
        products = self.products.get_many(i.product_id for i in items)

        lines = []
        for item in items:
            product = products.get(item.product_id)
            if product is None:
                raise NotFound(f"product {item.product_id} not found")
            lines.append(
                CartItemOut(
                    product_id=item.product_id,
                    name=product.name,
                    quantity=item.quantity,
                    price=product.price,
                )
            )

        return CartOut(
            items=lines,
            total_items=sum(line.quantity for line in lines),
            total_products=len(lines),
            total_price=sum((line.price * line.quantity for line in lines), Decimal("0.00")),
        )

    #commands
    def add_to_cart(self, user_id: int, product_id: int, quantity: int) -> None:
        if quantity <= 0:
            raise ValidationError("quantity must be greater than 0")

        with atomic(self.db):
            #koszyk tworzony leniwie przy pierwszym dodaniu
            cart = self.repo.get_cart_by_user(user_id)
            if not cart:
                cart = self.repo.create_cart(CartModel(user_id=user_id))
                logger.info(f"Created cart {cart.id} for user {user_id}")

            product = self.products.get(product_id)
            if not product:
                raise NotFound(f"product {product_id} not found")

            existing_item = self.repo.get_cart_item(cart.id, product_id)

            if existing_item is None:
                logger.info(f"Adding product {product_id} to cart {cart.id}")
                self.repo.add_cart_item(
                    CartItemModel(
                        cart_id=cart.id,
                        product_id=product_id,
                        quantity=quantity,
                    )
                )
            else:
                # stan magazynu sprawdzany tylko przy laczeniu pozycji,
                # nie wzgledem sumy ilosci w koszyku
                if product.stock < quantity:
                    raise InsufficientStock()

                logger.info(
                    f"Product {product_id} already in cart {cart.id}, quantity "
                    f"{existing_item.quantity} -> {existing_item.quantity + quantity}"
                )
                existing_item.quantity += quantity
                self.db.flush()

    def remove_from_cart(self, user_id: int, product_id: int) -> None:
        with atomic(self.db):
            cart = self.repo.get_cart_by_user(user_id)
            if not cart:
                raise EmptyCart()

            if self.repo.get_cart_item(cart.id, product_id) is None:
                raise NotFound(f"product {product_id} is not in the cart")

            removed = self.repo.delete_cart_item(cart.id, product_id)

        logger.info(f"Removed {removed} item(s) of product {product_id} from cart {cart.id}")

    def update_cart(self, user_id: int, request: UpdateCartIn) -> None:
        with atomic(self.db):
            cart = self.repo.get_cart_by_user(user_id)
            if not cart:
                raise EmptyCart()

            item = self.repo.get_cart_item(cart.id, request.product_id)
            if item is None:
                raise NotFound(f"product {request.product_id} is not in the cart")

            product = self.products.get(request.product_id)
            if product is None:
                raise NotFound(f"product {request.product_id} not found")

            if product.stock < request.quantity:
                raise InsufficientStock()

            #ilosc absolutna, nie dodawana
            item.quantity = request.quantity
            self.db.flush()

        logger.info(f"Cart {cart.id}: product {request.product_id} quantity set to {request.quantity}")
