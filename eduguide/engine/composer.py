"""Intent-keyed reply templates.

Each branch assembles the reply text and, where it attaches colleges,
ranks the catalog exactly once against the merged profile.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

from eduguide.data import CollegeCatalog
from eduguide.models import AIResponse, CollegeEntry, SchoolType, UserProfile

from .intent import OUT_OF_SCOPE, Intent
from .scorer import recommend

REFUSAL_MESSAGE = (
    "I can't help with live or simulated trading system design, execution, or risk controls "
    "in this EduGuide assistant. I'm scoped to college guidance only (school matching, admissions, "
    "financial aid, and tutoring support). If you want, I can still help with education planning "
    "or college recommendations."
)

ONBOARDING_QUESTIONS = [
    "What GPA should I use for your college matches?",
    "Which state or region are you targeting for school?",
    "What major or career path are you considering?",
]

MAJOR_BLURBS = {
    "Computer Science": (
        "CS is one of the most in-demand fields with median starting salaries of $75,000-$120,000. "
        "Look for schools with strong industry connections and internship programs."
    ),
    "Engineering": (
        "Engineering offers excellent career prospects. Top programs often have co-op opportunities "
        "and industry partnerships for hands-on experience."
    ),
    "Business": (
        "Business degrees are versatile. Look for schools with AACSB accreditation, strong internship "
        "placements, and alumni networks."
    ),
    "Biology": (
        "Perfect for pre-med or research careers. Look for schools with undergraduate research "
        "opportunities and strong lab facilities."
    ),
    "Nursing": (
        "Nursing has excellent job security and growth. Make sure the program is CCNE or ACEN "
        "accredited for licensure."
    ),
    "Psychology": (
        "Psychology opens doors to counseling, research, and many other careers. Consider schools "
        "with research opportunities if you plan to go to grad school."
    ),
    "Criminal Justice": (
        "A growing field with opportunities in law enforcement, courts, and corrections. Look for "
        "programs with internship placements."
    ),
    "Liberal Arts": (
        "A great choice if you're exploring your interests! Liberal arts builds critical thinking "
        "skills valued across every industry."
    ),
}

ADMISSIONS_CHECKLIST = """**General Application Checklist:**
- High school transcript (official)
- SAT/ACT scores (many schools are now test-optional)
- Personal essay / Statement of Purpose
- Letters of recommendation (2-3)
- Extracurricular activities list
- Application fee ($25-$90, fee waivers available)

**Key Deadlines:**
- Early Decision: November 1-15
- Early Action: November 1-15
- Regular Decision: January 1-15
- Community Colleges: Rolling (apply anytime)

**Community College Admission:**
- Open enrollment (everyone accepted!)
- Just need a HS diploma or GED
- Placement tests for math/English
- Can start any semester"""


@dataclass
class TurnContext:
    """What a branch needs to know about the current turn."""
    profile: UserProfile  # merged: caller's profile plus this turn's patch
    patch: UserProfile
    user_name: str | None = None

    @property
    def greeting_name(self) -> str:
        return self.user_name or "there"


def refusal_response() -> AIResponse:
    """Fixed reply for out-of-domain requests."""
    return AIResponse(
        content=REFUSAL_MESSAGE,
        profile_updates=UserProfile(),
        follow_up_questions=list(ONBOARDING_QUESTIONS),
        intent=OUT_OF_SCOPE,
    )


def gpa_commentary(gpa: float) -> str:
    if gpa >= 3.8:
        return "That's an excellent GPA! You're competitive for top-tier universities including Ivy League schools."
    if gpa >= 3.5:
        return "That's a strong GPA! You're competitive for many selective universities and have great options."
    if gpa >= 3.0:
        return "That's a solid GPA! You have many good options across state universities and some selective schools."
    if gpa >= 2.5:
        return "You have several paths available! Many state universities and community colleges would be a great fit."
    return (
        "Don't worry! Community colleges offer open enrollment and are an excellent starting point. "
        "Many students transfer to 4-year universities after improving their GPA."
    )


def _format_gpa(gpa: float) -> str:
    return f"{gpa:g}"


class ResponseComposer:
    """Builds the ``AIResponse`` for a classified intent."""

    def __init__(self, catalog: CollegeCatalog):
        self.catalog = catalog
        self._branches: dict[Intent, Callable[[TurnContext], AIResponse]] = {
            Intent.GREETING: self._greeting,
            Intent.RECOMMENDATION: self._recommendation,
            Intent.GPA_DISCUSSION: self._gpa_discussion,
            Intent.FINANCIAL_AID: self._financial_aid,
            Intent.ADMISSIONS: self._admissions,
            Intent.COMMUNITY_COLLEGE: self._community_college,
            Intent.COMPARISON: self._comparison,
            Intent.MAJOR_SELECTION: self._major_selection,
            Intent.ONLINE_LEARNING: self._online_learning,
            Intent.TEST_PREP: self._test_prep,
            Intent.ESSAY_HELP: self._essay_help,
            Intent.THANKS: self._thanks,
            Intent.GENERAL: self._general,
        }

    def compose(self, intent: Intent, context: TurnContext) -> AIResponse:
        response = self._branches[intent](context)
        response.intent = intent.value
        return response

    def _recommend(self, profile: UserProfile, limit: int) -> list[CollegeEntry]:
        return recommend(profile, self.catalog, limit)

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def _greeting(self, ctx: TurnContext) -> AIResponse:
        content = (
            f"Hi {ctx.greeting_name}! I'm your EduGuide AI college advisor. I'm here to help you find "
            "the right college or university for your situation.\n\n"
            "To give you the best recommendations, I'd love to know:\n\n"
            "**1. What's your current GPA?** (e.g., \"My GPA is 3.2\")\n"
            "**2. Where are you located or where would you like to study?**\n"
            "**3. What do you want to study?** (e.g., Computer Science, Nursing, Business)\n"
            "**4. What's your budget preference?** (affordable, moderate, or flexible)\n\n"
            "Share any or all of these and I'll match you with schools that fit!"
        )
        return AIResponse(content=content, profile_updates=ctx.patch)

    def _gpa_discussion(self, ctx: TurnContext) -> AIResponse:
        gpa = ctx.patch.gpa
        if gpa is None:
            content = (
                "I'd love to help you find colleges that match your academic profile! What's your current GPA? "
                "Just tell me something like \"My GPA is 3.2\" and I'll find schools where you'd be competitive.\n\n"
                "If you don't have a specific GPA, no worries. Community colleges have open enrollment, "
                "and many universities have flexible admission standards."
            )
            return AIResponse(content=content, profile_updates=ctx.patch)

        colleges = self._recommend(ctx.profile, 4)
        content = f"Great, I see your GPA is **{_format_gpa(gpa)}**. {gpa_commentary(gpa)}"
        if colleges:
            content += "\n\nBased on your profile so far, here are some schools that could be a good fit:"
        content += (
            "\n\nTell me more about what you'd like to study and where you'd like to be, "
            "and I'll refine these recommendations!"
        )
        return AIResponse(content=content, colleges=colleges, profile_updates=ctx.patch)

    def _recommendation(self, ctx: TurnContext) -> AIResponse:
        profile = ctx.profile
        colleges = self._recommend(profile, 5)

        details: list[str] = []
        if profile.gpa is not None:
            details.append(f"GPA: {_format_gpa(profile.gpa)}")
        if profile.state:
            details.append(f"Location: {profile.state}")
        if profile.intended_major:
            details.append(f"Major: {profile.intended_major}")
        if profile.budget:
            details.append(f"Budget: {profile.budget}")

        if details:
            content = f"Based on your profile ({', '.join(details)}), here are my top recommendations for you:"
        else:
            content = (
                "I'd love to give you personalized recommendations! Here are some popular options to start. "
                "**To get better matches, tell me:**\n\n"
                "- Your GPA (e.g., \"My GPA is 3.0\")\n"
                "- Your preferred state/location\n"
                "- What you want to study\n"
                "- Your budget preference\n\n"
                "Here are some diverse options to explore:"
            )
        return AIResponse(content=content, colleges=colleges, profile_updates=ctx.patch)

    def _financial_aid(self, ctx: TurnContext) -> AIResponse:
        profile = ctx.profile
        # Aid conversations always surface the most affordable matches
        colleges = self._recommend(replace(profile, budget="low"), 3)

        if profile.state:
            state_aid = (
                f"As a {profile.state} resident, check your state's grant programs. Many states offer "
                "significant tuition assistance for in-state students."
            )
        else:
            state_aid = (
                "Your state likely has its own grant programs. Tell me which state you're in and "
                "I'll give you specifics!"
            )
        merit_note = f" (your {_format_gpa(profile.gpa)} GPA qualifies you for many!)" if profile.gpa else ""

        content = (
            "Here's an overview of how paying for college works:\n\n"
            "**Federal Aid (FAFSA is key!):**\n"
            "- **Pell Grants**: Up to $7,395/year (you don't repay this!)\n"
            "- **Federal Student Loans**: Subsidized & unsubsidized options\n"
            "- **Work-Study**: Part-time campus jobs\n\n"
            f"**State Aid:**\n{state_aid}\n\n"
            "**Scholarships:**\n"
            f"- **Merit-Based**: Based on GPA{merit_note}\n"
            "- **Need-Based**: Based on family income\n"
            "- **Identity-Based**: First-generation, minority, women in STEM, etc.\n"
            "- **Field-Specific**: Many programs offer scholarships for in-demand fields\n\n"
            "**Pro Tips:**\n"
            "1. File the FAFSA as early as October 1st\n"
            "2. Apply to schools with high financial aid percentages\n"
            "3. Community colleges are extremely affordable ($1,000-$5,000/year)\n"
            "4. Many private schools offer generous aid that makes them cheaper than public schools\n\n"
            "Here are some schools known for strong financial aid:"
        )
        return AIResponse(content=content, colleges=colleges, profile_updates=ctx.patch)

    def _admissions(self, ctx: TurnContext) -> AIResponse:
        gpa = ctx.profile.gpa
        content = "Here's what you need to know about college admissions:\n\n"

        if gpa:
            content += f"**With your {_format_gpa(gpa)} GPA:**\n"
            if gpa >= 3.8:
                content += (
                    "- You're competitive for top-tier and Ivy League schools\n"
                    "- Apply to a mix of reach, match, and safety schools\n"
                    "- Focus on strong essays and extracurriculars to stand out\n\n"
                )
            elif gpa >= 3.0:
                content += (
                    "- You're a strong candidate for many state universities\n"
                    "- Consider schools where your GPA is at or above the average\n"
                    "- Strong test scores and essays can boost your application\n\n"
                )
            else:
                content += (
                    "- Community colleges are an excellent starting point (open enrollment!)\n"
                    "- Many state schools have holistic admissions looking beyond just GPA\n"
                    "- Consider writing a compelling personal statement explaining your growth\n\n"
                )

        content += ADMISSIONS_CHECKLIST

        colleges = self._recommend(ctx.profile, 3)
        if colleges:
            content += "\n\nHere are some schools that match your profile:"
        return AIResponse(content=content, colleges=colleges, profile_updates=ctx.patch)

    def _community_college(self, ctx: TurnContext) -> AIResponse:
        only_cc = [SchoolType.COMMUNITY_COLLEGE.value]
        profile = ctx.profile
        colleges = self._recommend(replace(profile, school_type=only_cc), 4)

        if profile.gpa and profile.gpa < 2.5:
            gpa_note = (
                "**Given your GPA, starting at a community college is a strategic move!** You can raise your "
                "GPA, save money, and transfer to a great university. Many successful professionals took this path."
            )
        else:
            gpa_note = (
                "**Even with a strong GPA, community colleges can save you thousands** while you figure out your path."
            )
        near = f" near {profile.state}" if profile.state else ""

        content = (
            "Community colleges are an incredible option! Here's why they're so valuable:\n\n"
            "**Advantages:**\n"
            "- **Affordable**: Typically $1,000-$5,000/year (vs. $15,000-$60,000 at universities)\n"
            "- **Open Enrollment**: No GPA or test score requirements\n"
            "- **Transfer Pathways**: Many have guaranteed transfer agreements with top universities\n"
            "- **Flexible**: Evening, weekend, and online classes available\n"
            "- **Smaller Classes**: More personal attention from instructors\n"
            "- **Career Programs**: Certificates and associate degrees for immediate employment\n\n"
            "**Transfer Success Stories:**\n"
            "- Santa Monica College is the #1 transfer school to UCLA\n"
            "- Many UC and CSU students started at community colleges\n"
            "- Transfer students often perform as well as or better than direct admits\n\n"
            f"{gpa_note}\n\n"
            f"Here are some top community colleges{near}:"
        )
        patch = replace(ctx.patch, school_type=list(only_cc))
        return AIResponse(content=content, colleges=colleges, profile_updates=patch)

    def _comparison(self, ctx: TurnContext) -> AIResponse:
        colleges = self._recommend(ctx.profile, 4)
        content = (
            "Comparing schools side by side is smart. Here are the key factors to weigh:\n\n"
            "**Academic Factors:**\n"
            "- Program strength in your intended major\n"
            "- Class sizes and student-to-faculty ratio\n"
            "- Research opportunities\n"
            "- Graduation and job placement rates\n\n"
            "**Financial Factors:**\n"
            "- Tuition (in-state vs. out-of-state)\n"
            "- Financial aid and scholarship availability\n"
            "- Cost of living in the area\n"
            "- Return on investment (salary vs. debt)\n\n"
            "**Campus & Culture:**\n"
            "- Location (urban, suburban, rural)\n"
            "- Campus size and facilities\n"
            "- Student diversity\n"
            "- Extracurricular activities and social life\n\n"
            "**Practical Factors:**\n"
            "- Distance from home\n"
            "- Internship/job opportunities nearby\n"
            "- Transfer agreements (for community colleges)\n"
            "- Online/hybrid options\n\n"
            "Here are some schools you might want to compare based on your profile:"
        )
        return AIResponse(content=content, colleges=colleges, profile_updates=ctx.patch)

    def _major_selection(self, ctx: TurnContext) -> AIResponse:
        major = ctx.patch.intended_major
        if major:
            colleges = self._recommend(ctx.profile, 4)
            blurb = MAJOR_BLURBS.get(
                major,
                f"This field has growing career opportunities. Let me find schools with strong {major} programs.",
            )
            content = (
                f"**{major}** is a great field of study! {blurb}\n\n"
                "Here are schools with strong programs in this field:"
            )
            return AIResponse(content=content, colleges=colleges, profile_updates=ctx.patch)

        content = (
            "Choosing a major is a big decision! Here are some things to consider:\n\n"
            "**Highest-Demand Fields:**\n"
            "1. Computer Science / Software Engineering\n"
            "2. Nursing / Healthcare\n"
            "3. Business / Finance\n"
            "4. Engineering (all types)\n"
            "5. Data Science / AI\n\n"
            "**Tips for Choosing:**\n"
            "- Think about what subjects excite you\n"
            "- Consider job market demand and salary potential\n"
            "- Talk to professionals in fields you're interested in\n"
            "- Remember: many people change majors, and that's okay!\n"
            "- Community colleges are great for exploring different subjects\n\n"
            "**Undecided? That's perfectly fine!**\n"
            "Many colleges let you enter undeclared and explore before choosing.\n\n"
            "What subjects interest you? Tell me and I'll find schools with strong programs!"
        )
        return AIResponse(content=content, profile_updates=ctx.patch)

    def _online_learning(self, ctx: TurnContext) -> AIResponse:
        content = (
            "Online learning has expanded dramatically! Here are your options:\n\n"
            "**Fully Online Programs:**\n"
            "- Arizona State University (ASU): 300+ online programs\n"
            "- University of Florida: top-ranked online bachelor's programs\n"
            "- Many community colleges offer fully online associate degrees\n\n"
            "**Benefits of Online Learning:**\n"
            "- Flexible schedule for working students\n"
            "- Study from anywhere\n"
            "- Often more affordable (no room & board)\n"
            "- Same degree as on-campus students\n\n"
            "**Things to Consider:**\n"
            "- Accreditation (make sure it's regionally accredited)\n"
            "- Self-discipline required\n"
            "- Fewer networking/social opportunities\n"
            "- Some programs need in-person components (labs, clinicals)\n\n"
            "**Hybrid Options:**\n"
            "Many schools now offer hybrid programs where some classes meet online and some in person.\n\n"
            "Would you like me to find specific online programs in your area of interest?"
        )
        return AIResponse(content=content, profile_updates=ctx.patch)

    def _test_prep(self, ctx: TurnContext) -> AIResponse:
        profile = ctx.profile
        has_score = bool(profile.sat_score or profile.act_score)

        closing = ""
        if profile.sat_score:
            closing += f"With your SAT score of {profile.sat_score}, "
        if profile.act_score:
            closing += f"With your ACT score of {profile.act_score}, "
        closing += (
            "let me find schools where you'd be competitive:"
            if has_score
            else "Would you like me to find test-optional schools?"
        )

        content = (
            "Here's what you need to know about standardized tests:\n\n"
            "**SAT vs ACT:**\n"
            "| Feature | SAT | ACT |\n"
            "|---------|-----|-----|\n"
            "| Sections | Reading, Writing, Math | English, Math, Reading, Science |\n"
            "| Score Range | 400-1600 | 1-36 |\n"
            "| Time | 3 hours | 2 hours 55 min |\n"
            "| Best For | Strong readers/writers | Fast test-takers, science lovers |\n\n"
            "**Test-Optional Schools:**\n"
            "Many schools are now test-optional, so you can choose whether to submit scores. "
            "This is great news if:\n"
            "- Your GPA is strong but test scores don't reflect your ability\n"
            "- You haven't been able to prepare adequately\n"
            "- Test anxiety affects your performance\n\n"
            "**Free Prep Resources:**\n"
            "- Khan Academy (official SAT partner)\n"
            "- ACT Academy\n"
            "- Your local library\n\n"
            "**Community colleges don't require SAT/ACT!** They use placement tests instead.\n\n"
            f"{closing}"
        )
        colleges = self._recommend(profile, 3) if has_score else None
        return AIResponse(content=content, colleges=colleges, profile_updates=ctx.patch)

    def _essay_help(self, ctx: TurnContext) -> AIResponse:
        content = (
            "The college essay is your chance to stand out! Here's my guide:\n\n"
            "**Common Essay Prompts:**\n"
            "1. Share your story: background, identity, interest, or talent\n"
            "2. Describe a challenge or setback and how you grew from it\n"
            "3. A topic that captivates you so much you lose track of time\n"
            "4. Describe a problem you'd like to solve\n"
            "5. A personal achievement or event that sparked growth\n\n"
            "**Essay Tips:**\n"
            "- **Be Authentic**: Write in your own voice, not what you think they want to hear\n"
            "- **Show, Don't Tell**: Use specific examples and stories\n"
            "- **Start Strong**: Hook the reader in the first sentence\n"
            "- **Be Specific**: Avoid cliches and generic statements\n"
            "- **Proofread**: Have someone else read it too\n"
            "- **Answer the Prompt**: Stay focused on what they're asking\n\n"
            "**Common Mistakes to Avoid:**\n"
            "- Don't repeat your resume/activities list\n"
            "- Don't write about something just because it sounds impressive\n"
            "- Don't use overly complex vocabulary unnaturally\n"
            "- Don't exceed the word limit\n\n"
            "**Need more help?** Our tutoring service includes essay review and writing assistance. "
            "Check out our [tutoring plans](/tutoring) for personalized essay coaching!"
        )
        return AIResponse(content=content, profile_updates=ctx.patch)

    def _thanks(self, ctx: TurnContext) -> AIResponse:
        content = (
            f"You're welcome, {ctx.greeting_name}! I'm here anytime you need help with your college search. "
            "Finding the right school is a journey, and I'm with you every step of the way.\n\n"
            "Come back anytime to:\n"
            "- Get updated recommendations\n"
            "- Ask about specific schools\n"
            "- Get help with applications\n"
            "- Explore financial aid options\n\n"
            "Good luck on your educational journey!"
        )
        return AIResponse(content=content, profile_updates=ctx.patch)

    def _general(self, ctx: TurnContext) -> AIResponse:
        patch = ctx.patch
        has_updates = not patch.is_empty()
        colleges = self._recommend(ctx.profile, 4 if has_updates else 3)

        if has_updates:
            learned: list[str] = []
            if patch.gpa is not None:
                learned.append(f"GPA: {_format_gpa(patch.gpa)}")
            if patch.state:
                learned.append(f"Location: {patch.state}")
            if patch.intended_major:
                learned.append(f"Major Interest: {patch.intended_major}")
            if patch.budget:
                learned.append(f"Budget: {patch.budget}")
            if patch.school_type:
                learned.append(f"School Type: {', '.join(patch.school_type)}")
            if patch.sat_score:
                learned.append(f"SAT: {patch.sat_score}")
            if patch.act_score:
                learned.append(f"ACT: {patch.act_score}")
            if patch.demographics:
                learned.append(f"Background: {', '.join(patch.demographics)}")
            content = (
                f"Thanks for sharing! I've updated your profile with: **{' | '.join(learned)}**\n\n"
                "Based on what I know about you, here are my recommendations:"
            )
        else:
            content = (
                "I'd be happy to help you explore your college options! To give you the most relevant "
                "recommendations, could you share:\n\n"
                "**About You:**\n"
                "- Your current GPA (e.g., \"My GPA is 3.2\")\n"
                "- Your location or preferred state\n"
                "- What you'd like to study\n\n"
                "**Preferences:**\n"
                "- Budget level (affordable, moderate, or flexible)\n"
                "- School type (community college, university)\n"
                "- Any special circumstances (first-generation, transfer, military, etc.)\n\n"
                "The more you share, the better I can match you with the right schools! "
                "Here are some popular options to start:"
            )
        return AIResponse(content=content, colleges=colleges, profile_updates=patch)
