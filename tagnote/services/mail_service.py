"""
이메일 발송 서비스 - 로그인 링크
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
import smtplib
import ssl
import asyncio
import logging

from tagnote.core.config import settings


logger = logging.getLogger(__name__)


def _build_magic_link_email(login_url: str, is_signup: bool) -> tuple[str, str, str]:
    """로그인 링크 메일 제목/텍스트/HTML 생성"""
    if is_signup:
        subject = "[TagNote] アカウント作成の確認"
        lead = "TagNote へのご登録ありがとうございます。下のリンクからアカウント作成を完了してください。"
    else:
        subject = "[TagNote] ログインリンク"
        lead = "下のリンクをクリックすると TagNote にログインできます。"
    minutes = settings.MAGIC_LINK_EXPIRE_MINUTES
    text = (
        f"{lead}\n\n"
        f"{login_url}\n\n"
        f"このリンクは {minutes} 分間だけ有効です。\n"
        "心当たりがない場合はこのメールを破棄してください。"
    )
    html = f"""
    <div style="font-family: system-ui, -apple-system, 'Hiragino Sans', 'Noto Sans JP', sans-serif; color:#0f172a;">
      <h2>{subject}</h2>
      <p>{lead}</p>
      <p>
        <a href="{login_url}" style="display:inline-block;padding:12px 16px;background:#0f172a;color:#fff;text-decoration:none;border-radius:9999px;">ログインする</a>
      </p>
      <p>ボタンが動作しない場合は、次のリンクをブラウザに貼り付けてください。</p>
      <p><a href="{login_url}">{login_url}</a></p>
      <p style="color:#be123c;font-weight:600;">このリンクは {minutes} 分間だけ有効です。</p>
      <hr style="margin:20px 0;border:none;border-top:1px solid #e2e8f0;" />
      <p style="font-size:12px;color:#64748b;">このメールは送信専用です。</p>
    </div>
    """
    return subject, text, html


def _send_email_sync(to_email: str, subject: str, text: str, html: str) -> None:
    """동기 SMTP 전송 (스레드 풀에서 실행)"""
    if not settings.SMTP_HOST:
        # 개발 환경: 실제 발송 없이 로그로 대체
        logger.info("[DEV] 이메일 미발송 (SMTP 미설정) → 제목: %s, 수신자: %s\n%s", subject, to_email, text)
        return

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>"
    msg["To"] = to_email
    msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))

    context = ssl.create_default_context()
    if settings.SMTP_USE_SSL:
        with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, context=context) as server:
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.sendmail(settings.EMAIL_FROM_ADDRESS, [to_email], msg.as_string())
    else:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            if settings.SMTP_USE_TLS:
                server.starttls(context=context)
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.sendmail(settings.EMAIL_FROM_ADDRESS, [to_email], msg.as_string())


async def send_magic_link_email(to_email: str, login_url: str, is_signup: bool = False) -> None:
    """로그인 링크 메일 발송 (비동기)"""
    subject, text, html = _build_magic_link_email(login_url, is_signup)
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, _send_email_sync, to_email, subject, text, html)
