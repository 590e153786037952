from enum import Enum
from typing import Optional
from pydantic import BaseModel


class DashboardRoute(str, Enum):
    OVERVIEW = "/"
    CAMPAIGNS = "/campanhas"
    CRM_PIPELINES = "/crm/pipelines"
    CRM_SETTINGS = "/crm/configuracoes"
    FUNNELS = "/funis"
    REACH = "/analise/alcance"
    TRAFFIC = "/analise/trafego"
    CONTENT = "/analise/conteudo"
    EFFICIENCY = "/analise/eficiencia"
    INVESTMENTS = "/analise/investimentos"
    LEADS = "/conversoes/leads"
    FINANCIAL = "/conversoes/financeiro"
    EVENTS = "/eventos"
    EVENTS_QUARTERLY = "/eventos/trimestral"
    EVENTS_MONTHLY = "/eventos/mensal"
    EVENTS_YEARLY = "/eventos/anual"
    MANAGED_CAMPAIGNS = "/gestao/campanhas"
    REPORTS = "/gestao/relatorios"
    WEEKLY_SCOREBOARD = "/placar-semanal"
    SETTINGS = "/configuracoes"


class RouteInfo(BaseModel):
    section: str
    name: str
    href: DashboardRoute


# Sidebar order; also the fallback order when "/" is not allowed
ROUTE_CATALOG: list[RouteInfo] = [
    RouteInfo(section="Dashboard", name="Visão Geral", href=DashboardRoute.OVERVIEW),
    RouteInfo(section="Campanhas", name="Campanhas", href=DashboardRoute.CAMPAIGNS),
    RouteInfo(section="CRM", name="Pipelines", href=DashboardRoute.CRM_PIPELINES),
    RouteInfo(section="CRM", name="Configurações CRM", href=DashboardRoute.CRM_SETTINGS),
    RouteInfo(section="Funis", name="Meus Funis", href=DashboardRoute.FUNNELS),
    RouteInfo(section="Análise", name="Alcance", href=DashboardRoute.REACH),
    RouteInfo(section="Análise", name="Tráfego", href=DashboardRoute.TRAFFIC),
    RouteInfo(section="Análise", name="Conteúdo", href=DashboardRoute.CONTENT),
    RouteInfo(section="Análise", name="Eficiência", href=DashboardRoute.EFFICIENCY),
    RouteInfo(section="Análise", name="Investimentos", href=DashboardRoute.INVESTMENTS),
    RouteInfo(section="Conversões", name="Leads", href=DashboardRoute.LEADS),
    RouteInfo(section="Conversões", name="Financeiro", href=DashboardRoute.FINANCIAL),
    RouteInfo(section="Eventos", name="Eventos", href=DashboardRoute.EVENTS),
    RouteInfo(section="Eventos", name="Trimestral", href=DashboardRoute.EVENTS_QUARTERLY),
    RouteInfo(section="Eventos", name="Mensal", href=DashboardRoute.EVENTS_MONTHLY),
    RouteInfo(section="Eventos", name="Anual", href=DashboardRoute.EVENTS_YEARLY),
    RouteInfo(section="Gestão", name="Campanhas (Gestão)", href=DashboardRoute.MANAGED_CAMPAIGNS),
    RouteInfo(section="Gestão", name="Relatórios", href=DashboardRoute.REPORTS),
    RouteInfo(section="Placar", name="Placar Semanal", href=DashboardRoute.WEEKLY_SCOREBOARD),
    RouteInfo(section="Config", name="Configurações", href=DashboardRoute.SETTINGS),
]

ALL_ROUTES: list[str] = [info.href.value for info in ROUTE_CATALOG]

PUBLIC_ROUTES: frozenset[str] = frozenset({"/login", "/signup", "/forgot-password"})

HOME_ROUTE = DashboardRoute.OVERVIEW


def parse_route(path: str) -> Optional[DashboardRoute]:
    """Map a raw path to its catalog route, or None if it is not a dashboard page."""
    try:
        return DashboardRoute(path)
    except ValueError:
        return None
