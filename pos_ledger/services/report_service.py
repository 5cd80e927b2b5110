# ==============================================================================
# SERVICIO DE REPORTES (ReportAggregator)
# ==============================================================================
# Vistas derivadas de solo lectura sobre el historial de ventas.
# Todo se recalcula en cada llamada desde SaleLedger.list() y
# ProductStore.list(): no hay caché ni actualización incremental.
#
# VENTANAS: [ahora - N días, ahora], ambos extremos incluidos.
# MONTOS: sumas en punto flotante de Sale.total; el redondeo a 2 decimales
# es solo de presentación.
# ==============================================================================

import calendar
from collections import OrderedDict
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Callable, Dict, List, Optional

from pos_ledger.models import Sale
from pos_ledger.services.product_service import DEFAULT_LOW_STOCK_THRESHOLD, ProductStore
from pos_ledger.services.sales_service import SaleLedger, utc_now

WEEK_DAYS = 7
MONTH_DAYS = 30
TOP_PRODUCTS_LIMIT = 5
DASHBOARD_RECENT_SALES = 5
REPORT_RECENT_SALES = 10


class ReportAggregator:
    """
    Servicio para cálculo de reportes y métricas del panel.

    Responsabilidades:
    - Totales por ventana móvil (7 días, 30 días, histórico)
    - Ranking de productos más vendidos
    - Agrupar ingresos por día y por mes
    """

    def __init__(
        self,
        product_store: ProductStore,
        sale_ledger: SaleLedger,
        clock: Callable[[], datetime] = None,
        tz: Optional[tzinfo] = None
    ):
        """
        Args:
            product_store: Catálogo
            sale_ledger: Historial de ventas
            clock: Función que retorna el instante actual (para testing)
            tz: Zona horaria para agrupar por día calendario (UTC por defecto)
        """
        self.product_store = product_store
        self.sale_ledger = sale_ledger
        self.clock = clock or utc_now
        self.tz = tz or timezone.utc

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def _now(self) -> datetime:
        now = self.clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now.astimezone(self.tz)

    def _local_date(self, moment: datetime) -> date:
        return moment.astimezone(self.tz).date()

    def _in_window(self, sales: List[Sale], days: int, now: datetime) -> List[Sale]:
        start = now - timedelta(days=days)
        return [s for s in sales if start <= s.timestamp <= now]

    @staticmethod
    def _revenue(sales: List[Sale]) -> float:
        return sum(s.total for s in sales)

    # =========================================================================
    # TOTALES POR VENTANA
    # =========================================================================

    def rollup(self, days: Optional[int] = None) -> Dict[str, Any]:
        """
        Cantidad de ventas e ingresos de una ventana móvil.

        Args:
            days: Tamaño de la ventana; None = todo el historial

        Returns:
            {'sales': int, 'revenue': float}
        """
        sales = self.sale_ledger.list()
        if days is not None:
            sales = self._in_window(sales, days, self._now())
        return {'sales': len(sales), 'revenue': self._revenue(sales)}

    def summary(self) -> Dict[str, Any]:
        """Resumen semanal, de 30 días e histórico."""
        sales = self.sale_ledger.list()
        now = self._now()
        weekly = self._in_window(sales, WEEK_DAYS, now)
        monthly = self._in_window(sales, MONTH_DAYS, now)
        return {
            'weekly_sales': len(weekly),
            'weekly_revenue': self._revenue(weekly),
            'monthly_sales': len(monthly),
            'monthly_revenue': self._revenue(monthly),
            'total_sales': len(sales),
            'total_revenue': self._revenue(sales),
        }

    # =========================================================================
    # RANKING DE PRODUCTOS
    # =========================================================================

    def top_products(self, limit: int = TOP_PRODUCTS_LIMIT, days: int = WEEK_DAYS) -> List[Dict[str, Any]]:
        """
        Productos más vendidos (por cantidad) en la ventana.

        Los empates conservan el orden en que cada producto apareció por
        primera vez (ordenamiento estable), no el orden alfabético.

        Returns:
            [{'product_id', 'name', 'quantity', 'revenue'}, ...]
        """
        sales = self._in_window(self.sale_ledger.list(), days, self._now())

        totals: Dict[str, Dict[str, Any]] = {}
        for sale in sales:
            for item in sale.items:
                entry = totals.get(item.product_id)
                if entry is None:
                    entry = {
                        'product_id': item.product_id,
                        'name': item.product_name,
                        'quantity': 0,
                        'revenue': 0.0,
                    }
                    totals[item.product_id] = entry
                entry['quantity'] += item.quantity
                entry['revenue'] += item.quantity * item.price

        ranking = sorted(totals.values(), key=lambda e: e['quantity'], reverse=True)
        return ranking[:limit]

    # =========================================================================
    # AGRUPACIÓN POR DÍA / MES
    # =========================================================================

    def daily_revenue(self, days: int = WEEK_DAYS) -> 'OrderedDict[str, float]':
        """
        Ingresos por día de los últimos `days` días (hoy incluido).

        Todos los días aparecen, aunque no tengan ventas.

        Returns:
            {'YYYY-MM-DD': float} del más antiguo al más reciente
        """
        now = self._now()
        buckets: 'OrderedDict[str, float]' = OrderedDict()
        for offset in range(days - 1, -1, -1):
            buckets[(now - timedelta(days=offset)).date().isoformat()] = 0.0

        for sale in self._in_window(self.sale_ledger.list(), days, now):
            key = self._local_date(sale.timestamp).isoformat()
            if key in buckets:
                buckets[key] += sale.total
        return buckets

    def current_month_daily_revenue(self) -> 'OrderedDict[str, float]':
        """
        Ingresos por día del mes calendario actual, del día 1 al último.

        El último día se cuenta completo (hasta las 23:59:59).
        """
        now = self._now()
        _, last_day = calendar.monthrange(now.year, now.month)
        buckets: 'OrderedDict[str, float]' = OrderedDict()
        for day in range(1, last_day + 1):
            buckets[date(now.year, now.month, day).isoformat()] = 0.0

        for sale in self.sale_ledger.list():
            key = self._local_date(sale.timestamp).isoformat()
            if key in buckets:
                buckets[key] += sale.total
        return buckets

    def monthly_revenue(self) -> 'OrderedDict[str, Dict[str, Any]]':
        """
        Ventas e ingresos por mes de todo el historial.

        Returns:
            {'YYYY-MM': {'sales': int, 'revenue': float}} ordenado por mes
        """
        months: Dict[str, Dict[str, Any]] = {}
        for sale in self.sale_ledger.list():
            local = sale.timestamp.astimezone(self.tz)
            key = f"{local.year}-{local.month:02d}"
            entry = months.setdefault(key, {'sales': 0, 'revenue': 0.0})
            entry['sales'] += 1
            entry['revenue'] += sale.total
        return OrderedDict(sorted(months.items()))

    def recent_sales(self, limit: int = REPORT_RECENT_SALES) -> List[Dict[str, Any]]:
        """Últimas `limit` ventas registradas, la más reciente primero."""
        if limit <= 0:
            return []
        sales = self.sale_ledger.list()[-limit:]
        return [s.to_dict() for s in reversed(sales)]

    # =========================================================================
    # PANEL PRINCIPAL
    # =========================================================================

    def dashboard(self, low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> Dict[str, Any]:
        """Métricas del panel: totales, stock bajo y ventas de hoy."""
        sales = self.sale_ledger.list()
        products = self.product_store.list()
        today = self._now().date()
        todays = [s for s in sales if self._local_date(s.timestamp) == today]
        low_stock = [
            p.to_public_dict() for p in products
            if not p.is_service and p.stock <= low_stock_threshold
        ]
        return {
            'total_revenue': self._revenue(sales),
            'total_sales': len(sales),
            'total_products': len(products),
            'low_stock_products': low_stock,
            'todays_revenue': self._revenue(todays),
            'todays_sales': len(todays),
            'recent_sales': [s.to_dict() for s in reversed(sales[-DASHBOARD_RECENT_SALES:])],
        }

    def full_report(self) -> Dict[str, Any]:
        """Todas las vistas de la pantalla de reportes en un solo diccionario."""
        return {
            'generated_at': self._now().isoformat(),
            'summary': self.summary(),
            'top_products': self.top_products(),
            'daily_revenue': self.daily_revenue(),
            'current_month_daily_revenue': self.current_month_daily_revenue(),
            'monthly_revenue': self.monthly_revenue(),
            'recent_sales': self.recent_sales(REPORT_RECENT_SALES),
        }
