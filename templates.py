"""User-facing texts and the website request template"""

WELCOME_MESSAGE = (
    "Hi! I'm your AI website generator. I'll ask you a few questions to understand "
    "what kind of website you want, then create it for you instantly! Let's get started."
)

HELP_MESSAGE = """🤖 *AI Website Generator*

Answer a few questions and I'll build a single-file HTML website for you.

*Commands:*
/start - start a new website
/restart - throw away the current answers and start over
/history - show the conversation so far
/help - show this message

Pick options with the buttons. For the sections question select as many as you like, then press *Continue*."""

PROMPT_READY_MESSAGE = (
    "Perfect! I've analyzed your requirements and created a detailed prompt for your website. "
    "Please review it below and click 'Generate Website' when you're ready!"
)

GENERATING_MESSAGE = "🚀 Generating your website... This may take a moment!"

GENERATION_SUCCEEDED_MESSAGE = (
    "✨ Your website has been generated successfully! Download the HTML file below."
)

GENERATION_FAILED_MESSAGE = "❌ Sorry, there was an error generating your website. Please try again."

ERROR_MESSAGE = "❌ Something went wrong. Use /restart to start over."

FREE_TEXT_HINT = "✍️ Type your answer, or press Skip if you have nothing to add."

MULTI_CHOICE_HINT = "Select one or more options, then press Continue."

NONE_SPECIFIED = "None specified"

WEBSITE_PROMPT_TEMPLATE = """Create a complete, professional, all-in-one HTML website for a {business_type} business.

Design Requirements:
- Color scheme: {colors}
- Layout style: {layout}
- Overall style: {style}
- Include these sections: {sections}
- Additional features: {additional_features}

Technical Requirements:
- Single HTML file with embedded CSS and JavaScript
- Fully responsive design that works on all devices
- Modern, clean, and professional appearance
- Include placeholder content that's relevant to the business type
- Use modern CSS features like flexbox/grid for layout
- Include smooth scrolling and subtle animations
- Optimize for fast loading and good user experience
- Include proper meta tags and semantic HTML structure

Make it look professional and ready to use immediately. Include realistic placeholder content, images (use placeholder image services), and make sure all sections flow together cohesively."""
