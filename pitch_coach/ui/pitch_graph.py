import pygame
from typing import Optional

from ..core.interfaces import IPitchSource
from ..logger import get_logger
from ..note_types import ToleranceStatus, segments
from ..session import FeedbackFrame, PracticeSession, SessionConfig
from ..tolerance import tolerance_bands
from .scale import STATUS_COLORS, LogFrequencyScale, MeterScale, TimeScale

# Get logger for this module
logger = get_logger(__name__)

HALF_SEMITONE = 2.0 ** (1.0 / 24.0)

BAND_ALPHA = {
    ToleranceStatus.FAR: 38,
    ToleranceStatus.CLOSE: 51,
    ToleranceStatus.PERFECT: 77,
}

LEGEND = (
    (ToleranceStatus.PERFECT, "Perfect"),
    (ToleranceStatus.CLOSE, "Close"),
    (ToleranceStatus.FAR, "Far"),
)


class PitchGraphUI:
    """Pygame-based scrolling pitch graph for Pitch Coach"""

    def __init__(
        self,
        session: PracticeSession,
        pitch_source: IPitchSource,
        width: int = 1024,
        height: int = 768,
        fps: int = 60,
        tolerance_step: float = 5.0,
    ):
        """Initialize the Pygame UI

        Args:
            session: Practice session to drive and display
            pitch_source: Source of one pitch reading per frame
            width: Window width in pixels
            height: Window height in pixels
            fps: Frame rate cap; each frame is one session tick
            tolerance_step: Cents added or removed by the Up/Down keys
        """
        self.session = session
        self.pitch_source = pitch_source
        self.width = width
        self.height = height
        self.fps = fps
        self.tolerance_step = tolerance_step
        self.bg_color = (15, 23, 42)
        self.text_color = (255, 255, 255)
        self.screen = None
        self.overlay = None
        self.initialized = False
        self.clock = None
        self.running = False

        # Fonts
        self.title_font = None
        self.large_font = None
        self.medium_font = None
        self.small_font = None

        logger.debug("Initializing PitchGraphUI")

    def init_screen(self):
        """Initialize the Pygame screen and resources"""
        try:
            pygame.init()
            self.screen = pygame.display.set_mode((self.width, self.height))
            pygame.display.set_caption("Pitch Coach")
            self.overlay = pygame.Surface((self.width, self.height), pygame.SRCALPHA)

            # Initialize fonts
            self.title_font = pygame.font.SysFont("Arial", 72, bold=True)
            self.large_font = pygame.font.SysFont("Arial", 36, bold=True)
            self.medium_font = pygame.font.SysFont("Arial", 24)
            self.small_font = pygame.font.SysFont("Arial", 14)

            self.clock = pygame.time.Clock()
            self.initialized = True
            logger.info("Pygame UI initialized successfully")
            return self.screen

        except pygame.error as e:
            logger.error(f"Failed to initialize Pygame: {e}")
            self.cleanup()
            raise

    # Controls

    def toggle(self) -> None:
        """Start listening when idle, stop when active."""
        if self.session.is_active:
            # Stop the session first so no tick reaches it after this point
            self.session.stop()
            self.pitch_source.stop()
        elif self.pitch_source.start():
            self.session.start()
        else:
            logger.error("Could not start the pitch source")

    def handle_key(self, key) -> None:
        if key == pygame.K_SPACE:
            self.toggle()
        elif key == pygame.K_RIGHT:
            self.session.next_target()
        elif key == pygame.K_LEFT:
            self.session.previous_target()
        elif key == pygame.K_UP:
            self.session.set_tolerance(self.session.config.tolerance.widened(self.tolerance_step))
        elif key == pygame.K_DOWN:
            self.session.set_tolerance(self.session.config.tolerance.widened(-self.tolerance_step))
        elif key == pygame.K_ESCAPE:
            self.running = False

    # Drawing

    def _frequency_scale(self, config: SessionConfig) -> Optional[LogFrequencyScale]:
        min_freq, max_freq = config.frequency_range
        if min_freq > max_freq:
            return None
        return LogFrequencyScale(
            min_freq / HALF_SEMITONE, max_freq * HALF_SEMITONE, 0, self.height
        )

    def _draw_grid(self, grid, scale: LogFrequencyScale, naming: str) -> None:
        for entry in grid:
            y = scale.to_y(entry.frequency)
            top = scale.to_y(entry.upper_edge)
            bottom = scale.to_y(entry.lower_edge)

            # Alternate colors like piano keys
            fill = (0, 0, 0, 77) if entry.is_accidental else (255, 255, 255, 13)
            pygame.draw.rect(self.overlay, fill, (0, top, self.width, bottom - top))

            # Line at exact note frequency
            line = (255, 255, 255, 26) if entry.is_accidental else (255, 255, 255, 51)
            pygame.draw.line(self.overlay, line, (0, y), (self.width, y))

            # Note label on the right side
            label_color = (150, 150, 160) if entry.is_accidental else (200, 200, 210)
            label = self.small_font.render(entry.note.label(naming), True, label_color)
            self.screen.blit(label, label.get_rect(midright=(self.width - 10, y)))

    def _draw_bands(self, target: float, bands, scale: LogFrequencyScale) -> None:
        if not scale.contains(target):
            return

        for band in bands:
            top = scale.to_y(scale.clamp(band.upper))
            bottom = scale.to_y(scale.clamp(band.lower))
            color = STATUS_COLORS[band.status] + (BAND_ALPHA[band.status],)
            pygame.draw.rect(self.overlay, color, (0, top, self.width, bottom - top))

        # Dashed target line
        y = scale.to_y(target)
        for x in range(0, self.width, 15):
            pygame.draw.line(self.screen, (230, 230, 230), (x, y), (min(x + 10, self.width), y), 2)

    def _draw_trace(self, frame: FeedbackFrame, scale: LogFrequencyScale) -> None:
        times = TimeScale(frame.elapsed, frame.config.window_seconds, 0, self.width)
        pygame.draw.line(
            self.overlay, (255, 255, 255, 51), (times.center_x, 0), (times.center_x, self.height), 2
        )

        for run in segments(frame.samples):
            points = [
                (times.to_x(s.timestamp), scale.to_y(scale.clamp(s.frequency))) for s in run
            ]
            if len(points) > 1:
                pygame.draw.lines(self.screen, (240, 240, 240), False, points, 3)
            else:
                pygame.draw.circle(self.screen, (240, 240, 240), points[0], 2)

        # Current point at center, colored by distance from target
        if frame.classification and scale.contains(frame.frequency):
            color = STATUS_COLORS[frame.classification.status]
            center = (times.center_x, scale.to_y(frame.frequency))
            pygame.draw.circle(self.overlay, color + (64,), center, 24)
            pygame.draw.circle(self.screen, color, center, 12)

    def _draw_meter(self, classification, perfect: float) -> None:
        meter = MeterScale(self.width // 2 - 150, 300)
        y = self.height - 80
        pygame.draw.rect(self.screen, (60, 70, 90), (meter.left, y, meter.width, 10), border_radius=5)

        # In-tune zone around the center
        left, right = meter.to_x(-perfect), meter.to_x(perfect)
        pygame.draw.rect(
            self.screen, STATUS_COLORS[ToleranceStatus.PERFECT], (left, y, right - left, 10)
        )

        x = meter.to_x(classification.cents)
        pygame.draw.line(
            self.screen, STATUS_COLORS[classification.status], (x, y - 8), (x, y + 18), 4
        )

    def _draw_hud(self, frame: Optional[FeedbackFrame]) -> None:
        config = self.session.config
        exercise = self.session.exercise

        prompt = self.medium_font.render("Sing:", True, (160, 170, 190))
        self.screen.blit(prompt, (24, 24))
        target = self.title_font.render(config.target.label(config.naming), True, self.text_color)
        self.screen.blit(target, (24, 52))

        tolerance = self.small_font.render(
            f"Tolerance: {config.tolerance.unit:g} cents", True, (160, 170, 190)
        )
        self.screen.blit(tolerance, (24, 136))

        # Progress dots
        for i in range(len(exercise)):
            x = self.width - 24 - (len(exercise) - 1 - i) * 20
            if i == exercise.index:
                pygame.draw.circle(self.screen, self.text_color, (x, 30), 8)
            elif i < exercise.index:
                pygame.draw.circle(self.screen, STATUS_COLORS[ToleranceStatus.PERFECT], (x, 30), 6)
            else:
                pygame.draw.circle(self.screen, (90, 100, 120), (x, 30), 6)

        # Detected note and deviation
        if frame is not None and frame.detected is not None:
            classification = frame.classification
            text = f"{frame.detected.label}  {classification.cents:+d} cents  {classification.label}"
            surface = self.large_font.render(text, True, STATUS_COLORS[classification.status])
            self.screen.blit(surface, surface.get_rect(midbottom=(self.width // 2, self.height - 110)))
            self._draw_meter(classification, frame.config.tolerance.perfect)

        # Legend
        for i, (status, label) in enumerate(LEGEND):
            y = self.height - 90 + i * 24
            pygame.draw.rect(self.screen, STATUS_COLORS[status], (self.width - 130, y, 16, 16))
            surface = self.small_font.render(label, True, (200, 200, 210))
            self.screen.blit(surface, (self.width - 106, y))

        if not self.session.is_active:
            surface = self.medium_font.render(
                "Press Space to start, arrows to change note and tolerance", True, (140, 150, 170)
            )
            self.screen.blit(surface, surface.get_rect(center=(self.width // 2, self.height // 2)))

    def draw(self, frame: Optional[FeedbackFrame]) -> None:
        """Render one frame of the graph."""
        if not self.initialized or not self.screen:
            return

        config = frame.config if frame else self.session.config
        grid = frame.grid if frame else self.session.grid

        self.screen.fill(self.bg_color)
        self.overlay.fill((0, 0, 0, 0))

        scale = self._frequency_scale(config)
        if scale is not None:
            self._draw_grid(grid, scale, config.naming)
            bands = frame.bands if frame else tolerance_bands(config.target_frequency, config.tolerance)
            self._draw_bands(config.target_frequency, bands, scale)
            if frame is not None:
                self._draw_trace(frame, scale)

        self.screen.blit(self.overlay, (0, 0))
        self._draw_hud(frame)
        pygame.display.flip()

    # Main loop

    def run(self) -> None:
        """Run the render loop until the window is closed."""
        if not self.initialized:
            self.init_screen()

        logger.info("Starting render loop")
        self.running = True
        try:
            while self.running:
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        self.running = False
                    elif event.type == pygame.KEYDOWN:
                        self.handle_key(event.key)

                frame = None
                if self.session.is_active:
                    frame = self.session.tick(self.pitch_source.read())

                self.draw(frame)
                self.clock.tick(self.fps)
        finally:
            logger.info("Render loop ended")
            self.session.stop()
            self.pitch_source.stop()
            self.cleanup()

    def cleanup(self):
        """Clean up Pygame resources"""
        if self.initialized:
            logger.debug("Cleaning up Pygame resources")
            pygame.quit()
            self.initialized = False
