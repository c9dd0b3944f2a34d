from app.db.mongo import (
    asset_field_values_collection,
    asset_logs_collection,
    assets_collection,
    profiles_collection,
    sla_policies_collection,
    system_logs_collection,
    tickets_collection,
)
from app.repositories.asset_log_repository import AssetLogRepository
from app.repositories.system_log_repository import SystemLogRepository
from app.repositories.user_repository import UserRepository
from app.services.asset_log_service import AssetLogService
from app.services.assets_service import AssetService
from app.services.sla_service import SlaPolicyService
from app.services.system_log_service import SystemLogService
from app.services.tickets_service import TicketService

# one service per log collection and process so failure counters accumulate
asset_log_service = AssetLogService(
    AssetLogRepository(asset_logs_collection),
    users=UserRepository(profiles_collection),
)
asset_service = AssetService(
    assets_collection,
    asset_field_values_collection,
    asset_log_service,
)
sla_policy_service = SlaPolicyService(sla_policies_collection)
system_log_service = SystemLogService(
    SystemLogRepository(system_logs_collection),
    users=UserRepository(profiles_collection),
)
ticket_service = TicketService(tickets_collection, sla_policy_service, system_log_service)


def get_asset_log_service() -> AssetLogService:
    return asset_log_service


def get_asset_service() -> AssetService:
    return asset_service


def get_sla_policy_service() -> SlaPolicyService:
    return sla_policy_service


def get_ticket_service() -> TicketService:
    return ticket_service


def get_system_log_service() -> SystemLogService:
    return system_log_service
