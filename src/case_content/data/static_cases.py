"""Bundled case dataset.

Used to seed an empty ``cases`` collection and as the offline catalog when
the store is unreachable. Entries are in the legacy document shape; the
normalizer turns them into canonical cases.
"""

from typing import Any, Dict, List, Tuple

TUTORIAL_BLOG_CSS = """body {
    font-family: Arial, sans-serif;
    background-color: #f3f3f3;
    color: #333;
    padding: 20px;
    max-width: 800px;
    margin: 0 auto;
}

p {
    line-height: 1.6;
    margin: 20px 0;
}"""

STATIC_CASES: List[Dict[str, Any]] = [
    {
        "id": "case-vanishing-blogger",
        "title": "Detective Tutorial Case",
        "description": (
            "Learn the basics! A local blogger has gone missing. Fix his broken blog "
            "to uncover the truth behind his disappearance."
        ),
        "story": (
            "Sam Lens, a popular local blogger, has vanished without a trace. His last "
            "known activity was on his personal blog, which is now broken and messy. As a "
            "web detective, you must fix the HTML and CSS issues to reveal hidden clues "
            "about what happened to Sam."
        ),
        "objective": (
            "TUTORIAL: Learn the basics by investigating Sam's broken blog and fixing "
            "HTML/CSS issues to reveal three hidden clues."
        ),
        "isDetectiveMission": True,
        "cinematicSlides": [
            {
                "id": "intro-1",
                "title": "Missing Person Report",
                "dialogue": (
                    "Detective, we have a missing person case. Sam Lens, a local blogger, "
                    "hasn't been seen for 48 hours."
                ),
                "speaker": "Police Chief",
                "background": "police-station",
                "characterImage": "police-chief.png",
                "soundEffect": "typewriter",
            },
            {
                "id": "intro-2",
                "title": "Last Known Activity",
                "dialogue": (
                    "His last activity was on his personal blog. The site is completely "
                    "broken - almost like someone sabotaged it."
                ),
                "speaker": "Detective Codec",
                "background": "detective-office",
                "characterImage": "detective-codec.png",
                "soundEffect": "investigation",
            },
            {
                "id": "intro-3",
                "title": "The Investigation Begins",
                "dialogue": (
                    "Something tells me the answers are hidden in that broken code. "
                    "Let's investigate and see what we can uncover."
                ),
                "speaker": "Detective Codec",
                "background": "computer-screen",
                "characterImage": "detective-codec.png",
                "soundEffect": "keyboard-clicks",
            },
        ],
        "missions": [
            {
                "id": "clue-1",
                "title": "Clue 1: The Truth About NovaCorp",
                "description": (
                    "Sam's blog post about NovaCorp contains a hidden message. Fix the "
                    "broken HTML to unlock Clue 1."
                ),
                "objective": "Replace deprecated HTML tags and reveal the hidden content to unlock Clue 1.",
                "brokenHtml": (
                    "<center><h1>The Truth About NovaCorp</h1></center>\n"
                    "<p>Hey, it's Sam Lens. If you're reading this, I've probably vanished.</p>\n"
                    "<p hidden>Check my last Insta story before they wipe it.</p>\n"
                    "<center><p>Sam out.</p></center>"
                ),
                "brokenCss": TUTORIAL_BLOG_CSS,
                "targetHtml": (
                    "<header><h1>The Truth About NovaCorp</h1></header>\n"
                    "<main>\n"
                    "  <p>Hey, it's Sam Lens. If you're reading this, I've probably vanished.</p>\n"
                    "  <div class=\"revealed-message\"><p><strong>Check my last Insta story before they wipe it.</strong></p></div>\n"
                    "  <footer><p>Sam out.</p></footer>\n"
                    "</main>"
                ),
                "targetCss": TUTORIAL_BLOG_CSS + "\n\n.revealed-message {\n    background: #fff3cd;\n    border: 2px solid #f0ad4e;\n}",
                "successConditions": [
                    "Remove the hidden attribute and make the message visible",
                    "Replace <center> tags with proper HTML structure",
                ],
                "clueRevealed": "Check my last Insta story before they wipe it.",
                "clueUnlockCondition": "Remove the \"hidden\" attribute from the paragraph to reveal Sam's secret message",
                "aiHints": [
                    "There's a paragraph with the `hidden` attribute. Remove it to reveal Sam's clue.",
                    "The `<center>` tags are outdated. Replace them with `<header>` and `<footer>`.",
                ],
                "hintsSteps": [
                    {
                        "id": "remove-center",
                        "condition": "Remove <center> tags",
                        "hint": "Replace the old `<center>` tags with semantic elements like `<header>` and `<footer>`.",
                        "points": 5,
                    },
                    {
                        "id": "reveal-hidden-message",
                        "condition": "Remove the hidden attribute",
                        "hint": "Delete the `hidden` attribute from the paragraph to read Sam's message.",
                        "points": 5,
                    },
                ],
            },
            {
                "id": "clue-2",
                "title": "Clue 2: The Hidden Instagram Screenshot",
                "description": (
                    "Sam's investigation files contain hidden Instagram evidence. Fix the "
                    "CSS to unlock Clue 2."
                ),
                "objective": "Fix the CSS display property to reveal the hidden Instagram screenshot and unlock Clue 2.",
                "brokenHtml": (
                    "<section class=\"evidence\">\n"
                    "  <h3>Digital Evidence</h3>\n"
                    "  <div id=\"insta-clue\">Meet me where the shadows watch but the cameras don't.</div>\n"
                    "</section>"
                ),
                "brokenCss": "#insta-clue {\n    display: none;\n}",
                "targetHtml": (
                    "<section class=\"evidence\">\n"
                    "  <h3>Digital Evidence</h3>\n"
                    "  <div id=\"insta-clue\">Meet me where the shadows watch but the cameras don't.</div>\n"
                    "</section>"
                ),
                "targetCss": "#insta-clue {\n    display: block;\n    border: 2px solid #e1306c;\n}",
                "successConditions": ["Change display: none to display: block on #insta-clue"],
                "clueRevealed": "Meet me where the shadows watch but the cameras don't.",
                "clueUnlockCondition": "Make the #insta-clue element visible",
                "aiHints": [
                    "Look in the CSS for the `#insta-clue` selector and change `display: none` to `display: block`.",
                ],
                "hintsSteps": [
                    {
                        "id": "find-hidden-element",
                        "condition": "Locate the hidden Instagram evidence",
                        "hint": "Look for an element with `id=\"insta-clue\"` in the HTML.",
                        "points": 3,
                    },
                    {
                        "id": "fix-display-none",
                        "condition": "Change display: none to display: block",
                        "hint": "Find the CSS rule for `#insta-clue` and change `display: none` to `display: block`.",
                        "points": 5,
                    },
                ],
            },
            {
                "id": "clue-3",
                "title": "Clue 3: The Final Location",
                "description": (
                    "Sam's final message contains the key to finding him, but it's hidden in "
                    "broken code. Fix the HTML and CSS to unlock Clue 3."
                ),
                "objective": "Replace deprecated font tags and fix visibility to unlock Clue 3 and discover Sam's location.",
                "brokenHtml": (
                    "<section class=\"location-clue\">\n"
                    "  <h2>Meeting Point</h2>\n"
                    "  <p class=\"address\"><font color=\"gray\">Old Harbor Warehouse, Dock 7</font></p>\n"
                    "</section>"
                ),
                "brokenCss": ".address {\n    visibility: hidden;\n}",
                "targetHtml": (
                    "<section class=\"location-clue\">\n"
                    "  <h2>Meeting Point</h2>\n"
                    "  <p class=\"address\"><span>Old Harbor Warehouse, Dock 7</span></p>\n"
                    "</section>"
                ),
                "targetCss": ".address {\n    visibility: visible;\n    color: gray;\n}",
                "successConditions": [
                    "Replace <font> tags with CSS styling",
                    "Change visibility: hidden to visibility: visible",
                ],
                "clueRevealed": "Old Harbor Warehouse, Dock 7",
                "clueUnlockCondition": "Reveal the address hidden with visibility: hidden",
                "aiHints": [
                    "The address is hidden with `visibility: hidden`. Make it visible.",
                    "`<font>` is deprecated. Move the color into CSS.",
                ],
                "hintsSteps": [
                    {
                        "id": "find-address-clue",
                        "condition": "Locate the hidden address",
                        "hint": "The `.address` paragraph holds Sam's location.",
                        "points": 3,
                    },
                    {
                        "id": "fix-visibility-hidden",
                        "condition": "Change visibility: hidden to visibility: visible",
                        "hint": "Update the `.address` rule so the text becomes visible.",
                        "points": 5,
                    },
                    {
                        "id": "modernize-font-tags",
                        "condition": "Replace <font> tags",
                        "hint": "Swap `<font color>` for a `<span>` and a CSS color.",
                        "points": 4,
                    },
                ],
            },
        ],
        "finalResolution": (
            "Sam was hiding at the Old Harbor Warehouse with the evidence against NovaCorp. "
            "Thanks to your work, the story goes public and Sam is safe."
        ),
        "initialHtml": "",
        "initialCss": "",
        "targetHtml": "",
        "targetCss": "",
        "hints": [],
        "cluePoints": 750,
        "difficulty": "Beginner",
        "duration": "20-25 min",
    },
    {
        "id": "visual-vanishing-blogger",
        "title": "Vanishing Blogger",
        "description": (
            "Your first real case! A tech blogger named Rishi has vanished. Use visual "
            "investigation and coding skills to uncover the truth."
        ),
        "story": (
            "Rishi Nair, a tech and health blogger, has been reported missing after posting "
            "about exposing Sherpa companies. The police suspect foul play, but your tech "
            "skills might reveal the real truth."
        ),
        "objective": "Use visual investigation techniques and coding skills to solve the mystery of Rishi's disappearance.",
        "initialHtml": "",
        "initialCss": "",
        "targetHtml": "",
        "targetCss": "",
        "hints": [
            "Look for CSS properties that hide elements",
            "Check flex container alignment properties",
            "Adjust overflow and positioning values",
            "Fix grid-auto-rows for proper layout",
        ],
        "cluePoints": 750,
        "difficulty": "Beginner",
        "duration": "15-20 min",
        "isDetectiveMission": False,
    },
    {
        "id": "case-2",
        "title": "The Missing Navigation Mystery",
        "description": (
            "A modern website's navigation has disappeared! Use smart IDE features to "
            "create a professional header with navigation."
        ),
        "story": (
            "Detective, TechCorp's website navigation has gone missing! The company needs a "
            "modern, responsive navigation bar that works on all devices."
        ),
        "objective": "Create a modern navigation header using auto-complete, snippets, and AI suggestions.",
        "initialHtml": (
            "<div class=\"container\">\n"
            "  <div class=\"content\">\n"
            "    <h1>Welcome to TechCorp</h1>\n"
            "  </div>\n"
            "  <div class=\"navigation\">\n"
            "    <a href=\"#home\">Home</a>\n"
            "    <a href=\"#about\">About</a>\n"
            "  </div>\n"
            "</div>"
        ),
        "initialCss": ".container {\n  font-family: Arial, sans-serif;\n}",
        "targetHtml": (
            "<div class=\"container\">\n"
            "  <header class=\"content\">\n"
            "    <h1>Welcome to TechCorp</h1>\n"
            "    <nav class=\"navigation\">\n"
            "      <a href=\"#home\">Home</a>\n"
            "      <a href=\"#about\">About</a>\n"
            "    </nav>\n"
            "  </header>\n"
            "</div>"
        ),
        "targetCss": ".navigation {\n  display: flex;\n  justify-content: center;\n}",
        "hints": [
            "The `<div class=\"navigation\">` should be a `<nav>` tag.",
            "Wrap the heading in a `<header>` tag.",
            "Use `display: flex` on `.navigation` for modern alignment.",
        ],
        "cluePoints": 100,
        "difficulty": "Beginner",
        "duration": "15 min",
        "isComingSoon": True,
    },
    {
        "id": "case-3",
        "title": "Last Frame",
        "description": (
            "A murder investigation in Arjun's apartment. Use detective skills and HTML/CSS "
            "debugging to reveal clues and catch the killer."
        ),
        "story": (
            "Arjun Shetty, a crime photographer, is found dead in his apartment. Police find "
            "only a broken coffee cup near the body. Fix Arjun's broken local files to reveal "
            "hidden photos and text clues to find the killer."
        ),
        "objective": "Investigate Arjun's apartment, debug HTML/CSS micro-puzzles, and reveal clues to solve the murder.",
        "initialHtml": (
            "<div class=\"room\">\n"
            "  <img src=\"arjun_room.png\" alt=\"Arjun's Apartment\" class=\"scene-bg\" />\n"
            "  <div class=\"interactives\">\n"
            "    <img src=\"laptop_closeup.png\" class=\"interactive laptop\" alt=\"Laptop\" />\n"
            "  </div>\n"
            "</div>"
        ),
        "initialCss": ".room {\n  position: relative;\n  width: 900px;\n  height: 600px;\n}",
        "targetHtml": "",
        "targetCss": "",
        "hints": [
            "Laptop: fix hidden or misaligned containers to reveal all photos.",
            "Books: reveal the hidden div between book pages.",
            "Phone: debug the gallery CSS to reveal the message.",
        ],
        "cluePoints": 200,
        "difficulty": "Intermediate",
        "duration": "30 min",
        "isComingSoon": True,
    },
    {
        "id": "case-broken-portfolio",
        "title": "The Broken Portfolio",
        "description": "A developer's portfolio website has critical CSS and HTML issues that need immediate fixing.",
        "story": (
            "Alex, a talented web developer, is about to present their portfolio to potential "
            "employers tomorrow. However, their website is completely broken!"
        ),
        "objective": "Fix the HTML structure, CSS layout, color scheme, and responsive design to create a professional portfolio website.",
        "initialHtml": (
            "<header class=\"header\">\n"
            "  <nav class=\"navigation\">\n"
            "    <div class=\"logo\">Alex Smith</div>\n"
            "  </nav>\n"
            "</header>\n"
            "<img src=\"profile.jpg\">"
        ),
        "initialCss": ".header {\n  display: flex;\n  flex-wrap: nowrap;\n  color: #fffffg;\n}",
        "targetHtml": (
            "<header class=\"header\">\n"
            "  <nav class=\"navigation\">\n"
            "    <div class=\"logo\">Alex Smith</div>\n"
            "  </nav>\n"
            "</header>\n"
            "<img src=\"profile.jpg\" alt=\"Alex Smith\">"
        ),
        "targetCss": ".header {\n  display: flex;\n  flex-wrap: wrap;\n  color: #ffffff;\n}",
        "hints": [
            "Add alt attributes to images for accessibility.",
            "Check the color values for typos.",
            "Allow the flex container to wrap on small screens.",
        ],
        "cluePoints": 200,
        "difficulty": "Intermediate",
        "duration": "30 min",
        "isComingSoon": True,
    },
]

# Hand-maintained catalog order used when seeding; ids missing from
# STATIC_CASES are skipped.
SEED_ORDER: Tuple[str, ...] = (
    "case-vanishing-blogger",
    "visual-vanishing-blogger",
    "case-2",
    "case-3",
    "case-broken-portfolio",
)
