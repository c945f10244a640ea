import logging
import signal
from typing import Optional

from alerts import (
    AlertError,
    AlertScheduler,
    AudioDeviceLike,
    DeferredNotificationService,
    DeliveredAlert,
)
from app_config import AppConfig, AppConfigurationError, load_app_config, resolve_config_path
from pomodoro import SessionClock, SessionConfig
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from runtime.intents import ShutdownIntent
from runtime.ui import RuntimeUIPublisher
from server import ServerConfigurationError, UIServer, UIServerConfig


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("pomodoro_gate")


def setup_signal_handlers(engine: RuntimeEngine) -> None:
    """Turn SIGTERM and SIGINT into a shutdown intent for the runtime loop."""

    def signal_handler(signum: int, frame) -> None:
        signal_name = signal.Signals(signum).name
        logging.getLogger("pomodoro_gate").info("%s received, stopping...", signal_name)
        engine.submit(ShutdownIntent(reason=signal_name))

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def build_session_clock(app_config: AppConfig) -> SessionClock:
    settings = app_config.session
    config = SessionConfig(
        work_duration_seconds=settings.work_duration_seconds,
        break_duration_seconds=settings.break_duration_seconds,
        long_break_duration_seconds=settings.long_break_duration_seconds,
        long_break_every=settings.long_break_every,
        sessions_before_rest_prompt=settings.sessions_before_rest_prompt,
    )
    return SessionClock(
        config,
        strict=settings.strict_transitions,
        logger=logging.getLogger("pomodoro"),
    )


def build_audio_output(
    app_config: AppConfig,
    logger: logging.Logger,
) -> Optional[AudioDeviceLike]:
    settings = app_config.alerts
    if not settings.audio_enabled:
        logger.info("Alarm audio disabled by config")
        return None

    try:
        # PortAudio is only required when audio alerts are enabled.
        from alerts.output import SoundDeviceAlertOutput

        return SoundDeviceAlertOutput(
            frequency_hz=settings.pulse_frequency_hz,
            duration_seconds=settings.pulse_duration_seconds,
            volume=settings.pulse_volume,
            output_device_index=settings.output_device,
            logger=logging.getLogger("alerts.output"),
        )
    except (AlertError, ImportError, OSError) as error:
        logger.error("Alarm audio initialization error: %s", error)
        logger.warning("Continuing without alarm audio.")
        return None


def main() -> int:
    """Run the engagement-gated work/break timer."""
    logger = setup_logging(level=logging.INFO)

    try:
        config_path = resolve_config_path()
        app_config = load_app_config(str(config_path))
        logger.info("Loaded runtime config: %s", config_path)
    except AppConfigurationError as error:
        logger.error(f"App configuration error: {error}")
        return 1

    try:
        session_clock = build_session_clock(app_config)
    except ValueError as error:
        logger.error(f"Session configuration error: {error}")
        return 1

    ui_server: Optional[UIServer] = None
    try:
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error(f"UI server configuration error: {error}")
        return 1
    if ui_server_config.enabled:
        ui_server = UIServer(
            config=ui_server_config,
            logger=logging.getLogger("ui_server"),
        )
    else:
        logger.warning("UI server disabled; no intents can reach the session clock.")

    notifications: Optional[DeferredNotificationService] = None
    if app_config.alerts.notifications_enabled:
        publisher = RuntimeUIPublisher(ui_server)

        def deliver(alert: DeliveredAlert) -> None:
            logger.info("%s %s", alert.title, alert.body)
            publisher.publish_notification(alert)

        notifications = DeferredNotificationService(
            deliver,
            logger=logging.getLogger("alerts.notifications"),
        )

    alert_scheduler = AlertScheduler(
        notifications=notifications,
        audio=build_audio_output(app_config, logger),
        logger=logging.getLogger("alerts"),
    )

    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            app_config=app_config,
            session_clock=session_clock,
            alert_scheduler=alert_scheduler,
            ui_server=ui_server,
            hooks=RuntimeHooks(setup_signal_handlers=setup_signal_handlers),
        )
    )

    if ui_server is not None:
        ui_server.set_message_handler(engine.submit_message)
        try:
            logger.info("Starting UI server...")
            ui_server.start(timeout_seconds=5.0)
            logger.info(
                "UI server ready at http://%s:%d",
                ui_server.host,
                ui_server.port,
            )
        except Exception as error:
            logger.error(f"UI server startup failed: {error}")
            return 1

    return engine.run()


if __name__ == "__main__":
    raise SystemExit(main())
