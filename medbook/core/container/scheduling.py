"""
Scheduling Domain Container.

Single Responsibility: Wire all scheduling domain dependencies.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from medbook.config.settings import Settings
from medbook.database.async_db import get_async_db_context
from medbook.domains.scheduling.application.ports import (
    IBookingRepository,
    IDoctorDirectory,
    INotificationSender,
    IPaymentGateway,
    IScheduleRepository,
)
from medbook.domains.scheduling.application.services import BookingEventDispatcher
from medbook.domains.scheduling.application.use_cases import (
    CancelBookingUseCase,
    ConfirmPaymentUseCase,
    CreateBookingUseCase,
    GetAvailabilityUseCase,
    GetBookingUseCase,
    ManageScheduleUseCase,
    RescheduleBookingUseCase,
    UpdateBookingStatusUseCase,
)
from medbook.domains.scheduling.domain.services import (
    AccessPolicy,
    BookingStateMachine,
    Clock,
    RefundPolicy,
    SlotGenerator,
    SystemClock,
    build_fee_policy,
)
from medbook.domains.scheduling.infrastructure.external import HttpNotificationSender, HttpPaymentGateway
from medbook.domains.scheduling.infrastructure.repositories import (
    InMemoryBookingRepository,
    InMemoryDoctorDirectory,
    InMemoryScheduleRepository,
    InMemorySchedulingStore,
    SQLAlchemyBookingRepository,
    SQLAlchemyDoctorDirectory,
    SQLAlchemyScheduleRepository,
)

logger = logging.getLogger(__name__)


class SchedulingContainer:
    """
    Scheduling domain container.

    Process-wide services (slot generator, policies, clock, collaborators)
    are created once; repositories and use cases are created per request
    from a database session.
    """

    def __init__(
        self,
        settings: Settings,
        clock: Clock | None = None,
        payment_gateway: IPaymentGateway | None = None,
        notification_sender: INotificationSender | None = None,
    ):
        """
        Initialize scheduling container.

        Args:
            settings: Application settings
            clock: Clock override (tests); defaults to the operating timezone
            payment_gateway: Payment collaborator, optional
            notification_sender: Notification collaborator, optional
        """
        self.settings = settings
        self.clock = clock or SystemClock(settings.timezone)
        self.slot_generator = SlotGenerator(
            max_iterations=settings.SLOT_GENERATION_MAX_ITERATIONS,
            default_duration_minutes=settings.DEFAULT_SLOT_DURATION_MINUTES,
            default_max_patients=settings.DEFAULT_MAX_PATIENTS_PER_SLOT,
        )
        self.fee_policy = build_fee_policy(settings.PLATFORM_FEE_PERCENTAGE)
        self.refund_policy = RefundPolicy()
        self.access_policy = AccessPolicy()
        self.state_machine = BookingStateMachine(self.access_policy)
        self.payment_gateway = payment_gateway
        self.notification_sender = notification_sender
        self.events = BookingEventDispatcher(payment_gateway, notification_sender)

        logger.info(f"{type(self).__name__} initialized (timezone {settings.OPERATING_TIMEZONE})")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SchedulingContainer":
        """Build the production container with HTTP collaborators where configured."""
        payment_gateway = None
        notification_sender = None
        if settings.PAYMENT_SERVICE_URL:
            payment_gateway = HttpPaymentGateway(settings.PAYMENT_SERVICE_URL, settings.INTEGRATION_TIMEOUT_SECONDS)
        if settings.NOTIFICATION_SERVICE_URL:
            notification_sender = HttpNotificationSender(
                settings.NOTIFICATION_SERVICE_URL, settings.INTEGRATION_TIMEOUT_SECONDS
            )
        return cls(settings, payment_gateway=payment_gateway, notification_sender=notification_sender)

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[AsyncSession | None]:
        """Unit of work for one request."""
        async with get_async_db_context() as session:
            yield session

    async def close(self) -> None:
        for collaborator in (self.payment_gateway, self.notification_sender):
            close = getattr(collaborator, "close", None)
            if close is not None:
                await close()

    # ==================== REPOSITORIES ====================

    def create_doctor_directory(self, db) -> IDoctorDirectory:
        return SQLAlchemyDoctorDirectory(session=db)

    def create_schedule_repository(self, db) -> IScheduleRepository:
        return SQLAlchemyScheduleRepository(session=db)

    def create_booking_repository(self, db) -> IBookingRepository:
        return SQLAlchemyBookingRepository(session=db)

    # ==================== USE CASES ====================

    def create_get_availability_use_case(self, db) -> GetAvailabilityUseCase:
        return GetAvailabilityUseCase(
            doctor_directory=self.create_doctor_directory(db),
            schedule_repository=self.create_schedule_repository(db),
            booking_repository=self.create_booking_repository(db),
            slot_generator=self.slot_generator,
            clock=self.clock,
            default_days=self.settings.AVAILABILITY_DEFAULT_DAYS,
            max_days=self.settings.AVAILABILITY_MAX_DAYS,
        )

    def create_create_booking_use_case(self, db) -> CreateBookingUseCase:
        return CreateBookingUseCase(
            doctor_directory=self.create_doctor_directory(db),
            booking_repository=self.create_booking_repository(db),
            availability=self.create_get_availability_use_case(db),
            fee_policy=self.fee_policy,
            access_policy=self.access_policy,
            events=self.events,
            clock=self.clock,
            reservation_retries=self.settings.BOOKING_RESERVATION_RETRIES,
        )

    def create_get_booking_use_case(self, db) -> GetBookingUseCase:
        return GetBookingUseCase(
            booking_repository=self.create_booking_repository(db),
            access_policy=self.access_policy,
        )

    def create_cancel_booking_use_case(self, db) -> CancelBookingUseCase:
        return CancelBookingUseCase(
            booking_repository=self.create_booking_repository(db),
            state_machine=self.state_machine,
            refund_policy=self.refund_policy,
            events=self.events,
            clock=self.clock,
        )

    def create_update_booking_status_use_case(self, db) -> UpdateBookingStatusUseCase:
        return UpdateBookingStatusUseCase(
            booking_repository=self.create_booking_repository(db),
            state_machine=self.state_machine,
            cancel_booking=self.create_cancel_booking_use_case(db),
            events=self.events,
            clock=self.clock,
        )

    def create_confirm_payment_use_case(self, db) -> ConfirmPaymentUseCase:
        return ConfirmPaymentUseCase(
            booking_repository=self.create_booking_repository(db),
            state_machine=self.state_machine,
            events=self.events,
            clock=self.clock,
        )

    def create_reschedule_booking_use_case(self, db) -> RescheduleBookingUseCase:
        return RescheduleBookingUseCase(
            doctor_directory=self.create_doctor_directory(db),
            booking_repository=self.create_booking_repository(db),
            availability=self.create_get_availability_use_case(db),
            state_machine=self.state_machine,
            events=self.events,
            clock=self.clock,
            reservation_retries=self.settings.BOOKING_RESERVATION_RETRIES,
        )

    def create_manage_schedule_use_case(self, db) -> ManageScheduleUseCase:
        return ManageScheduleUseCase(
            doctor_directory=self.create_doctor_directory(db),
            schedule_repository=self.create_schedule_repository(db),
            access_policy=self.access_policy,
        )


class InMemorySchedulingContainer(SchedulingContainer):
    """
    Container backed by InMemorySchedulingStore.

    Used for local development without PostgreSQL and by the API tests.
    """

    def __init__(self, settings: Settings, store: InMemorySchedulingStore | None = None, **kwargs):
        super().__init__(settings, **kwargs)
        self.store = store or InMemorySchedulingStore()

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[AsyncSession | None]:
        yield None

    def create_doctor_directory(self, db) -> IDoctorDirectory:
        return InMemoryDoctorDirectory(self.store)

    def create_schedule_repository(self, db) -> IScheduleRepository:
        return InMemoryScheduleRepository(self.store)

    def create_booking_repository(self, db) -> IBookingRepository:
        return InMemoryBookingRepository(self.store)
