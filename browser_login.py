import enum
import logging
from datetime import date

from playwright.sync_api import Playwright

from config import Settings
from errors import ProtocolStateError


WEEKDAYS = {"lun.": 0, "mar.": 1, "mer.": 2, "jeu.": 3, "ven.": 4, "sam.": 5, "dim.": 6}
MONTHS = {
    "janv.": 1,
    "févr.": 2,
    "mars": 3,
    "avr.": 4,
    "mai": 5,
    "juin": 6,
    "juil.": 7,
    "août": 8,
    "sept.": 9,
    "oct.": 10,
    "nov.": 11,
    "déc.": 12,
}
MONTH_TITLES = [
    "Janvier",
    "Février",
    "Mars",
    "Avril",
    "Mai",
    "Juin",
    "Juillet",
    "Août",
    "Septembre",
    "Octobre",
    "Novembre",
    "Décembre",
]

LOGIN_INPUT = 'input[placeholder="Identifiant"]'
DEMO_BUTTON = 'button[title*="Se connecter"]'
HOMEWORK_MENU = 'li[aria-label="Travail à faire à la maison"][role="menuitem"] .label-submenu'
WEEK_LABEL = 'div[class="ocb-libelle ie-ellipsis"][role="button"]'
DATE_PICKER = 'div[class="ocb_cont as-input as-date-picker ie-ripple"]'
MONTH_OPTION = 'div[role="option"][class*="as-li c_1 ie-ellipsis"]'

logger = logging.getLogger(__name__)


class PageState(enum.Enum):
    LOGIN = "Login"
    HOME = "Home"
    HOMEWORK = "Homework"


def parse_week_label(label: str, today: date | None = None) -> date:
    """解析 "lun. 15 mars" 这类标签，页面上不显示年份，按星期推断年份"""
    parts = label.replace("\xa0", " ").split()
    if len(parts) != 3:
        raise ValueError(f"无法识别的日期: {label!r}")
    weekday, day, month = parts
    if weekday not in WEEKDAYS:
        raise ValueError(f"无法识别的星期: {weekday!r}")
    if month not in MONTHS:
        raise ValueError(f"无法识别的月份: {month!r}")
    if not day.isdigit() or not 1 <= int(day) <= 31:
        raise ValueError(f"无法识别的日期: {day!r}")

    today = today or date.today()
    candidates = []
    for year in (today.year - 1, today.year, today.year + 1):
        try:
            candidates.append(date(year, MONTHS[month], int(day)))
        except ValueError:
            continue
    if not candidates:
        raise ValueError(f"日期不存在: {label!r}")
    matching = [value for value in candidates if value.weekday() == WEEKDAYS[weekday]]
    if not matching:
        raise ValueError(f"星期与日期不符: {label!r}")
    return min(matching, key=lambda value: abs((value - today).days))


class PronoteBrowser:
    def __init__(self, playwright: Playwright, settings: Settings) -> None:
        launch_args = {
            "headless": True,
            "args": ["--no-sandbox", "--disable-dev-shm-usage"],
        }
        if settings.proxy:
            launch_args["proxy"] = {"server": settings.proxy}
        self._browser = playwright.chromium.launch(**launch_args)
        self._context = None
        try:
            self._context = self._browser.new_context(
                viewport={"width": 1920, "height": 1080},
                ignore_https_errors=not settings.verify_tls,
            )
            self._page = self._context.new_page()
            self._page.set_default_timeout(int(settings.timeout * 1000))
            self._page.goto(settings.entry_url, wait_until="domcontentloaded")
        except BaseException:
            self.close()
            raise
        self.page_state = PageState.LOGIN

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        try:
            if self._context is not None:
                self._context.close()
        finally:
            self._browser.close()

    def _require_login_page(self) -> None:
        if self.page_state is not PageState.LOGIN:
            raise ProtocolStateError(
                f"当前页面不是登录页 (page={self.page_state.value})，无法登录"
            )

    def authenticate(self, username: str, password: str) -> None:
        self._require_login_page()
        self._page.locator(LOGIN_INPUT).click()
        self._page.keyboard.type(username)
        self._page.keyboard.press("Tab")
        self._page.keyboard.type(password)
        self._page.keyboard.press("Enter")
        self.page_state = PageState.HOME

    def authenticate_as_demo_account(self) -> None:
        self._require_login_page()
        self._page.locator(DEMO_BUTTON).first.click()
        self.page_state = PageState.HOME

    def capture_screenshot(self, path) -> None:
        self._page.screenshot(path=str(path), full_page=True)

    def navigate_to_homework_section(self) -> None:
        self._page.locator(HOMEWORK_MENU).first.click()
        self.page_state = PageState.HOMEWORK

    def current_homework_week_start(self) -> date:
        # 第二个标签是当前周的起始日
        label = self._page.locator(WEEK_LABEL).nth(1).inner_text()
        return parse_week_label(label)

    def jump_to_homework_week(self, target: date) -> None:
        if self.current_homework_week_start() == target:
            return
        self._page.locator(DATE_PICKER).click()

        wanted = f"{MONTH_TITLES[target.month - 1]} {target.year}"
        options = self._page.locator(MONTH_OPTION)
        for index in range(options.count()):
            option = options.nth(index)
            if option.inner_text().strip() == wanted:
                option.click()
                break
        else:
            raise ValueError(f"日期超出范围: {wanted}")

        self._page.get_by_role("gridcell", name=str(target.day), exact=True).first.click()
        logger.info("jumped to homework week of %s", target.isoformat())
