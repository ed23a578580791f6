"""HTML bodies for relayed notifications.

All arguments must already be sanitized; the labels are the only markup.
"""


def contact_message(name: str, email: str, message: str) -> str:
    return (
        "<b>New Contact Form Message</b>\n\n"
        f"<b>Name:</b> {name}\n"
        f"<b>Email:</b> {email}\n"
        f"<b>Message:</b>\n{message}"
    )


def file_caption(name: str, email: str, explanation: str) -> str:
    caption = (
        "<b>New File Upload</b>\n\n"
        f"<b>Name:</b> {name}\n"
        f"<b>Email:</b> {email}"
    )
    if explanation:
        caption += f"\n<b>Explanation:</b>\n{explanation}"
    return caption


def submission_without_file(name: str, email: str, explanation: str) -> str:
    text = (
        "<b>New Contact Submission (No File)</b>\n\n"
        f"<b>Name:</b> {name}\n"
        f"<b>Email:</b> {email}"
    )
    if explanation:
        text += f"\n<b>Message:</b>\n{explanation}"
    return text
