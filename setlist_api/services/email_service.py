"""
Transactional emails (verification, welcome, reset, friendships).

Every helper returns the mailer's boolean; delivery failures never propagate.
"""

from __future__ import annotations

import html

from setlist_api.core.mailer import send_email
from setlist_api.core.utils import absolute_url

APP_NAME = "Setlist Manager"


def _button(url: str, label: str) -> str:
    return (
        f'<p><a href="{url}" style="background:#6366f1;color:#fff;padding:12px 18px;'
        f'border-radius:8px;text-decoration:none;">{label}</a></p>'
    )


def _wrap(name: str, body: str) -> str:
    return f"""
    <p>Ciao {html.escape(name or "")}!</p>
    {body}
    <p>Il team {APP_NAME}</p>
    """


def send_verification_email(to: str, name: str, token: str) -> bool:
    verify_url = absolute_url(f"/verify-email?token={token}")
    body = f"""
    <p>Grazie per esserti registrato. Conferma il tuo indirizzo email cliccando il pulsante qui sotto:</p>
    {_button(verify_url, "Verifica email")}
    <p>Se il pulsante non funziona, copia e incolla questo link nel browser:</p>
    <p><a href="{verify_url}">{verify_url}</a></p>
    <p>Il link scade tra 24 ore.</p>
    """
    return send_email(
        f"Verifica il tuo indirizzo email - {APP_NAME}",
        to,
        _wrap(name, body),
        f"Verifica il tuo indirizzo email: {verify_url}",
    )


def send_welcome_email(to: str, name: str) -> bool:
    login_url = absolute_url("/login")
    body = f"""
    <p>Il tuo account è attivo. Crea i tuoi brani, organizza le setlist e condividile con i tuoi amici.</p>
    {_button(login_url, "Inizia ora")}
    """
    return send_email(f"Benvenuto su {APP_NAME}!", to, _wrap(name, body), f"Benvenuto su {APP_NAME}: {login_url}")


def send_password_reset_email(to: str, name: str, token: str) -> bool:
    reset_url = absolute_url(f"/reset-password?token={token}")
    body = f"""
    <p>Abbiamo ricevuto una richiesta di reimpostare la tua password.</p>
    {_button(reset_url, "Reimposta password")}
    <p>Il link scade tra 1 ora. Se non sei stato tu, ignora questo messaggio.</p>
    """
    return send_email(
        f"Reset Password - {APP_NAME}",
        to,
        _wrap(name, body),
        f"Usa questo link per reimpostare la password: {reset_url}",
    )


def send_password_changed_email(to: str, name: str) -> bool:
    body = "<p>La password del tuo account è stata modificata. Se non sei stato tu, contattaci subito.</p>"
    return send_email(
        f"Password modificata - {APP_NAME}",
        to,
        _wrap(name, body),
        "La password del tuo account è stata modificata.",
    )


def send_friend_request_email(to: str, recipient_name: str, sender_name: str) -> bool:
    friends_url = absolute_url("/friends")
    sender = html.escape(sender_name or "")
    body = f"""
    <p><strong>{sender}</strong> ti ha inviato una richiesta di amicizia.</p>
    {_button(friends_url, "Vedi richiesta")}
    """
    return send_email(
        f"{sender_name} ti ha inviato una richiesta di amicizia!",
        to,
        _wrap(recipient_name, body),
        f"{sender_name} ti ha inviato una richiesta di amicizia: {friends_url}",
    )


def send_friend_accepted_email(to: str, recipient_name: str, friend_name: str) -> bool:
    friends_url = absolute_url("/friends")
    friend = html.escape(friend_name or "")
    body = f"""
    <p><strong>{friend}</strong> ha accettato la tua richiesta di amicizia. Ora potete condividere brani e setlist.</p>
    {_button(friends_url, "Vai agli amici")}
    """
    return send_email(
        f"{friend_name} ha accettato la tua richiesta di amicizia!",
        to,
        _wrap(recipient_name, body),
        f"{friend_name} ha accettato la tua richiesta di amicizia.",
    )
