# ==============================================================================
# SERVICIO DEL CARDÁPIO - Categorías, productos y adicionales
# ==============================================================================

import uuid
from typing import Any, Dict, List, Optional

from lanches_pos.errors import NotFoundError, PosError, ValidationError, failure
from lanches_pos.logger import log_error, log_event
from lanches_pos.models.entities import Category, Product, ProductExtra
from lanches_pos.models.money import to_money
from lanches_pos.repositories.interfaces import ICatalogRepository


class CatalogService:
    """
    Servicio del cardápio.

    Responsabilidades:
    - CRUD de categorías (sin borrar categorías en uso)
    - CRUD de productos con su lista de adicionales
    - Propagar cambios de producto a los pedidos abiertos
    """

    def __init__(self, catalog_repo: ICatalogRepository, order_service=None):
        self.catalog_repo = catalog_repo
        self.order_service = order_service

    # =========================================================================
    # CATEGORÍAS
    # =========================================================================

    def list_categories(self) -> List[Category]:
        """Categorías ordenadas por `order`."""
        return [Category.from_dict(c) for c in self.catalog_repo.get_categories()]

    def save_category(self, name: str, order: Any = None,
                      category_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Crea o renombra/reordena una categoría.

        Returns:
            Dict con resultado (ok, category, error)
        """
        name = (name or '').strip()
        if not name:
            return failure(ValidationError('La categoría necesita un nombre'))
        existing = {c.id: c for c in self.list_categories()}
        if category_id and category_id not in existing:
            return failure(NotFoundError('Categoría no encontrada'))

        if order in (None, ''):
            position = existing[category_id].order if category_id else \
                max((c.order for c in existing.values()), default=0) + 1
        else:
            try:
                position = int(order)
            except (TypeError, ValueError):
                return failure(ValidationError('Orden inválido'))

        category = Category(id=category_id or '', name=name, order=position)
        try:
            stored = self.catalog_repo.upsert_category(category.to_dict())
        except PosError as e:
            log_error("Error guardando categoría", e)
            return failure(e)
        log_event(f"Categoría guardada: {name}")
        return {'ok': True, 'category': Category.from_dict(stored)}

    def delete_category(self, category_id: str) -> Dict[str, Any]:
        """
        Elimina una categoría. Si algún producto la usa se rechaza
        sin modificar nada.
        """
        try:
            removed = self.catalog_repo.delete_category(category_id)
        except PosError as e:
            log_error(f"No se eliminó la categoría {category_id}", e)
            return failure(e)
        if not removed:
            return failure(NotFoundError('Categoría no encontrada'))
        log_event(f"Categoría eliminada: {category_id}")
        return {'ok': True}

    # =========================================================================
    # PRODUCTOS
    # =========================================================================

    def list_products(self) -> List[Product]:
        """Todos los productos (activos e inactivos) por nombre."""
        products = [Product.from_dict(p) for p in self.catalog_repo.get_products()]
        return sorted(products, key=lambda p: p.name.lower())

    def get_product(self, product_id: str) -> Optional[Product]:
        record = self.catalog_repo.get_product(product_id)
        return Product.from_dict(record) if record else None

    def active_menu(self) -> List[Dict[str, Any]]:
        """
        Menú para el cliente: categorías en orden con sus productos activos
        (solo adicionales activos). Las categorías vacías se omiten.
        """
        products = [p for p in self.list_products() if p.is_active]
        menu = []
        for category in self.list_categories():
            entries = []
            for product in products:
                if product.category_id != category.id:
                    continue
                data = product.to_dict()
                data['extras'] = [e.to_dict() for e in product.active_extras]
                data.pop('cost_price', None)
                entries.append(data)
            if entries:
                menu.append({'category': category.to_dict(), 'products': entries})
        return menu

    def _parse_product(self, data: Dict[str, Any], product_id: Optional[str]) -> Product:
        name = (data.get('name') or '').strip()
        if not name:
            raise ValidationError('El producto necesita un nombre')

        price = to_money(data.get('price'), default=None)
        if price is None or price < 0:
            raise ValidationError('Precio inválido')

        cost_price = None
        if data.get('cost_price') not in (None, ''):
            cost_price = to_money(data.get('cost_price'), default=None)
            if cost_price is None or cost_price < 0:
                raise ValidationError('Costo inválido')

        category_id = str(data.get('category_id') or '')
        if category_id and category_id not in {c.id for c in self.list_categories()}:
            raise ValidationError('Categoría no encontrada')

        extras = []
        seen = set()
        for raw in data.get('extras') or []:
            if not isinstance(raw, dict):
                raise ValidationError('Adicional inválido')
            extra_name = (raw.get('name') or '').strip()
            extra_price = to_money(raw.get('price'), default=None)
            if not extra_name or extra_price is None or extra_price < 0:
                raise ValidationError('Adicional inválido')
            extra_id = str(raw.get('id') or uuid.uuid4().hex)
            if extra_id in seen:
                raise ValidationError(f"Adicional repetido: {extra_name}")
            seen.add(extra_id)
            extras.append(ProductExtra(
                id=extra_id,
                name=extra_name,
                price=extra_price,
                is_active=bool(raw.get('is_active', True)),
            ))

        return Product(
            id=product_id or '',
            name=name,
            description=(data.get('description') or '').strip(),
            price=price,
            cost_price=cost_price,
            is_active=bool(data.get('is_active', True)),
            category_id=category_id,
            image=data.get('image') or None,
            extras=extras,
        )

    def save_product(self, data: Dict[str, Any], product_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Crea o actualiza un producto (la lista de adicionales se reemplaza
        entera: así se agregan, editan y quitan adicionales).

        Al actualizar, la nueva versión se copia a los pedidos abiertos.

        Returns:
            Dict con resultado (ok, product, updated_orders, error)
        """
        if product_id and self.catalog_repo.get_product(product_id) is None:
            return failure(NotFoundError('Producto no encontrado'))
        try:
            product = self._parse_product(data or {}, product_id)
            stored = Product.from_dict(self.catalog_repo.upsert_product(product.to_dict()))
        except PosError as e:
            if not isinstance(e, ValidationError):
                log_error("Error guardando producto", e)
            return failure(e)

        log_event(f"Producto guardado: {stored.name} ({stored.price})")
        if not product_id:
            return {'ok': True, 'product': stored, 'updated_orders': 0}
        return self._propagate(stored)

    def _propagate(self, product: Product) -> Dict[str, Any]:
        """Copia la versión guardada del producto a los pedidos abiertos."""
        result = {'ok': True, 'product': product, 'updated_orders': 0}
        if self.order_service is None:
            return result
        try:
            result['updated_orders'] = self.order_service.propagate_product(product)
        except PosError as e:
            # El producto ya quedó guardado; se informa la propagación fallida
            log_error(f"Error propagando '{product.name}' a pedidos abiertos", e)
            result['warning'] = e.message
        return result

    def set_product_active(self, product_id: str, is_active: bool) -> Dict[str, Any]:
        product = self.get_product(product_id)
        if product is None:
            return failure(NotFoundError('Producto no encontrado'))
        product.is_active = bool(is_active)
        try:
            stored = Product.from_dict(self.catalog_repo.upsert_product(product.to_dict()))
        except PosError as e:
            log_error("Error guardando producto", e)
            return failure(e)
        log_event(f"Producto {'activado' if stored.is_active else 'desactivado'}: {stored.name}")
        return self._propagate(stored)

    def delete_product(self, product_id: str) -> Dict[str, Any]:
        """Los pedidos ya hechos conservan su copia del producto."""
        try:
            removed = self.catalog_repo.delete_product(product_id)
        except PosError as e:
            log_error("Error eliminando producto", e)
            return failure(e)
        if not removed:
            return failure(NotFoundError('Producto no encontrado'))
        log_event(f"Producto eliminado: {product_id}")
        return {'ok': True}
