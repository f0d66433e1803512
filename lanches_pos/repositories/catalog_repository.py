# ==============================================================================
# REPOSITORIO DEL CARDÁPIO - Categorías y productos
# ==============================================================================
# Encapsula todo el acceso a catalog.json
# ==============================================================================

import os
import uuid
from typing import Any, Dict, List, Optional

from lanches_pos.errors import IntegrityError
from lanches_pos.repositories.base import BaseRepository

# Cardápio de ejemplo (POS_SEED_DEMO=1)
DEMO_CATALOG = {
    'categories': [
        {'id': 'lanches', 'name': 'Lanches', 'order': 1},
        {'id': 'bebidas', 'name': 'Bebidas', 'order': 2},
    ],
    'products': [
        {
            'id': 'x-burger',
            'name': 'X-Burger',
            'description': 'Pão, hambúrguer, queijo e salada',
            'price': '18.90',
            'cost_price': None,
            'is_active': True,
            'category_id': 'lanches',
            'image': None,
            'extras': [
                {'id': 'bacon', 'name': 'Bacon', 'price': '4.00', 'is_active': True},
                {'id': 'ovo', 'name': 'Ovo', 'price': '3.00', 'is_active': True},
            ],
        },
    ],
}


class CatalogRepository(BaseRepository):
    """
    Repositorio del cardápio.

    Formato de catalog.json:
    {
        "categories": [{"id": "lanches", "name": "Lanches", "order": 1}],
        "products": [{"id": "x-burger", "category_id": "lanches", "extras": [...]}]
    }
    """

    channel = 'catalog'

    def __init__(self, base_path: str, notifier=None, seed: bool = False):
        """
        Args:
            base_path: Carpeta de datos
            notifier: Publicador de eventos de cambio
            seed: Si True y el archivo no existe, se crea con el cardápio de ejemplo
        """
        self._seed = seed
        super().__init__(os.path.join(base_path, 'catalog.json'), notifier)

    def _empty_data(self) -> Dict[str, List]:
        if self._seed:
            return {
                'categories': [dict(c) for c in DEMO_CATALOG['categories']],
                'products': [dict(p) for p in DEMO_CATALOG['products']],
            }
        return {'categories': [], 'products': []}

    def _load(self) -> Dict[str, List]:
        data = self._read_raw()
        if not isinstance(data, dict):
            data = {}
        data.setdefault('categories', [])
        data.setdefault('products', [])
        return data

    @staticmethod
    def _upsert(records: List[Dict[str, Any]], record: Dict[str, Any]) -> Dict[str, Any]:
        stored = dict(record)
        if not stored.get('id'):
            stored['id'] = uuid.uuid4().hex
        for i, existing in enumerate(records):
            if existing.get('id') == stored['id']:
                records[i] = stored
                break
        else:
            records.append(stored)
        return stored

    # =========================================================================
    # CATEGORÍAS
    # =========================================================================

    def get_categories(self) -> List[Dict[str, Any]]:
        return sorted(self._load()['categories'], key=lambda c: c.get('order') or 0)

    def upsert_category(self, record: Dict[str, Any]) -> Dict[str, Any]:
        with self._file_lock:
            data = self._load()
            stored = self._upsert(data['categories'], record)
            self._write_raw(data)
            return stored

    def delete_category(self, category_id: str) -> bool:
        """
        Elimina una categoría.

        Raises:
            IntegrityError: Si algún producto la referencia (no se modifica nada)
        """
        with self._file_lock:
            data = self._load()
            in_use = [p for p in data['products'] if p.get('category_id') == category_id]
            if in_use:
                raise IntegrityError(
                    f"La categoría está en uso por {len(in_use)} producto(s). "
                    "Mueve o elimina los productos primero."
                )
            remaining = [c for c in data['categories'] if c.get('id') != category_id]
            if len(remaining) == len(data['categories']):
                return False
            data['categories'] = remaining
            self._write_raw(data)
            return True

    # =========================================================================
    # PRODUCTOS
    # =========================================================================

    def get_products(self) -> List[Dict[str, Any]]:
        return self._load()['products']

    def get_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        for product in self.get_products():
            if product.get('id') == product_id:
                return product
        return None

    def upsert_product(self, record: Dict[str, Any]) -> Dict[str, Any]:
        with self._file_lock:
            data = self._load()
            stored = self._upsert(data['products'], record)
            self._write_raw(data)
            return stored

    def delete_product(self, product_id: str) -> bool:
        with self._file_lock:
            data = self._load()
            remaining = [p for p in data['products'] if p.get('id') != product_id]
            if len(remaining) == len(data['products']):
                return False
            data['products'] = remaining
            self._write_raw(data)
            return True
