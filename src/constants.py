"""All magic values live here — no inline literals anywhere else."""

# Telegram typing indicator re-send interval (seconds).
# The TYPING action expires after ~5 s, so we refresh every 4 s.
TELEGRAM_TYPING_INTERVAL: float = 4.0

# Credential store
DEFAULT_CREDENTIALS_PATH = ".captioner_credentials.json"

# Remote services
SERVICE_CAPTION = "Hugging Face"
SERVICE_INSIGHT = "OpenRouter"
DEFAULT_CAPTION_API_BASE = "https://api-inference.huggingface.co"
DEFAULT_INSIGHT_API_BASE = "https://openrouter.ai/api/v1"
DEFAULT_SAMPLES_BASE_URL = "http://localhost:8000"
DEFAULT_CAPTION_MODEL = "Salesforce/blip-image-captioning-large"
DEFAULT_INSIGHT_MODEL = "mistralai/mistral-7b-instruct"
DEFAULT_APP_REFERER = "https://github.com/smart-vision-captioner"
DEFAULT_APP_TITLE = "Smart Vision Captioner Agent"
CAPTION_FORM_FIELD = "inputs"
DEFAULT_IMAGE_NAME = "image.jpg"
DEFAULT_SAMPLE_NAME = "sample.jpg"
UPLOAD_PHOTO_NAME = "photo.jpg"

# Insight generation — fixed so runs are reproducible
INSIGHT_SYSTEM_PROMPT = (
    "You are SmartVisionAgent, a precise and concise assistant for turning "
    "raw image captions into practical insights."
)
INSIGHT_USER_TEMPLATE = '%s\n\nRaw caption: "%s"'
INSIGHT_TEMPERATURE: float = 0.4
INSIGHT_MAX_TOKENS = 200
DEFAULT_PROMPT = (
    "Summarize what is happening in this image and suggest one practical next step."
)

# Sample gallery
SAMPLES = (
    ("Burnt PCB", "samples/burnt_pcb.jpg", "Sample of a burnt circuit board"),
    ("Lab Equipment", "samples/lab_equipment.jpg", "Sample of laboratory equipment"),
    ("Classroom", "samples/classroom.jpg", "Sample of a classroom environment"),
)

# Output panel markers
CAPTION_PLACEHOLDER = "Awaiting analysis..."
INSIGHT_PLACEHOLDER = "Your insight will appear here."
CAPTION_PENDING = "Generating caption..."
INSIGHT_PENDING = "Thinking..."
CAPTION_UNAVAILABLE = "No caption available."
INSIGHT_UNAVAILABLE = "No insight generated."

# Pipeline status
STATUS_VALIDATING = "🔐 Validating inputs..."
STATUS_CAPTIONING = "🖼️ Generating caption with BLIP..."
STATUS_INSIGHTING = "🤖 Requesting OpenRouter insight..."
STATUS_DONE = "✅ Caption & insight ready."
STATUS_FAILED = "❌ %s"

# Validation messages
MSG_MISSING_CAPTION_KEY = "Please enter your Hugging Face token."
MSG_MISSING_INSIGHT_KEY = "Please enter your OpenRouter API key."
MSG_MISSING_IMAGE = "Choose a sample image or upload your own before analyzing."

# Service error messages
MSG_ERR_STATUS = "%s error (%s): %s"
MSG_ERR_TRANSPORT = "%s request failed: %s"
MSG_ERR_REMOTE = "%s error: %s"
MSG_ERR_UNEXPECTED = "Unexpected response from %s API."
MSG_ERR_EMPTY = "%s returned an empty response."
MSG_ERR_SAMPLE = "Failed to load sample %s (%s)"

# Selection / samples status
MSG_SAMPLE_LOADING = "📸 Loading sample image..."
MSG_SAMPLE_RECHECK = "🔄 Checking for newly added sample image..."
MSG_SAMPLE_READY = "✅ Sample image ready. Add your keys to analyze."
MSG_SAMPLE_FAILED = "⚠️ Unable to load sample image. Place a file at %s."
MSG_SAMPLE_UNKNOWN = "Unknown sample: %s\n\n%s"
MSG_SAMPLE_SUPERSEDED = "Sample load for %s superseded by a newer selection"
MSG_SAMPLES_HEADER = "Samples (use /sample <name>):"
MSG_SAMPLE_LINE = "  • %s — %s%s"
MSG_SAMPLE_MISSING_MARK = " (missing)"
MSG_UPLOAD_READY = "📂 Custom image ready. Provide keys to continue."
MSG_CLEARED = "✨ Cleared. Ready for a new image."
MSG_NO_IMAGE = "No image selected yet."
MSG_IMAGE_SELECTED = "%s (%.1f KB)"

# Log messages
MSG_BOT_STARTING = "Starting Vision Captioner bot…"
MSG_BLOCKED_CHAT = "Blocked update from chat_id: %s"
MSG_ANALYSIS_BUSY = "Analysis already running — ignoring new request"
MSG_ANALYSIS_FAILED = "Analysis failed: %s"
MSG_ANALYSIS_DONE = "Analysis finished in %.1fs"
MSG_RESET_DEFERRED = "Output reset skipped — analysis in progress"
MSG_SEND_FAIL = "Telegram send_message failed: %s"

# Telegram commands
CMD_HELP = "help"
CMD_STATUS = "status"
CMD_SAMPLES = "samples"
CMD_SAMPLE = "sample"
CMD_CLEAR = "clear"
CMD_ANALYZE = "analyze"
CMD_SET = "set"

# /set fields → credential store keys
SET_FIELDS = {
    "caption_key": "caption_api_key",
    "insight_key": "insight_api_key",
    "caption_model": "caption_model",
    "insight_model": "insight_model",
}
MSG_SET_USAGE = (
    "Usage:\n"
    "  /set caption_key <token>    — Hugging Face token\n"
    "  /set insight_key <key>      — OpenRouter API key\n"
    "  /set caption_model <id>     — captioning model\n"
    "  /set insight_model <id>     — chat model\n\n"
    "Leave the value blank to forget a saved field."
)
MSG_SET_SAVED = "Saved %s."
MSG_SET_CLEARED = "Forgot %s — using the default."
MSG_ANALYZE_BUSY = "An analysis is already running — wait for it to finish."
MSG_IMAGE_UNSUPPORTED = "Only image files can be analyzed."
MSG_UPLOAD_FAILED = "Could not download that image — please try again."

MSG_STATUS = (
    "Status\n"
    "  Image          : %s\n"
    "  Caption key    : %s\n"
    "  Insight key    : %s\n"
    "  Caption model  : %s\n"
    "  Insight model  : %s\n"
)
MSG_KEY_SET = "set"
MSG_KEY_MISSING = "missing"

MSG_HELP = (
    "Smart Vision Captioner — caption an image, then get an insight\n"
    "\n"
    "Commands:\n"
    "  /help                     — show this message\n"
    "  /status                   — selected image and saved settings\n"
    "  /samples                  — list the sample images\n"
    "  /sample <name>            — select a sample image\n"
    "  /clear                    — forget the selected image\n"
    "  /analyze [prompt]         — caption the image, then ask for an insight\n"
    "  /set <field> [value]      — save a key or model (see /set)\n"
    "\n"
    "Media:\n"
    "  Photo / image file        — becomes the selected image\n"
)

# Telegram analysis panel — one message, edited as the run progresses
MSG_PANEL = "%s\n\n📝 Caption: %s\n\n💡 Insight: %s"
MSG_PANEL_EDIT_FAILED = "Panel edit failed: %s"
