"""DOM probes evaluated inside the page under test."""

NAVIGATION_LOAD_TIME = """() => {
    const timing = performance.timing;
    return Math.max(0, timing.loadEventEnd - timing.navigationStart);
}"""

PAGE_TITLE = "() => document.title"

BASIC_ELEMENTS = """() => ({
    hasHeadings: document.querySelectorAll('h1, h2, h3, h4, h5, h6').length > 0,
    hasImages: document.querySelectorAll('img').length > 0,
    hasLinks: document.querySelectorAll('a').length > 0,
    hasForm: document.querySelectorAll('form').length > 0
})"""

IMAGE_ALT_STATS = """() => {
    const images = Array.from(document.querySelectorAll('img'));
    const total = images.length;
    const withAlt = images.filter(img => img.alt && img.alt.trim()).length;
    return { total, withAlt, percentage: total > 0 ? (withAlt / total) * 100 : 0 };
}"""

HEADING_STRUCTURE = """() => {
    const headings = Array.from(document.querySelectorAll('h1, h2, h3, h4, h5, h6'));
    return {
        hasH1: document.querySelectorAll('h1').length > 0,
        total: headings.length,
        structure: headings.map(h => h.tagName.toLowerCase())
    };
}"""

PERFORMANCE_METRICS = """() => {
    const navigation = performance.getEntriesByType('navigation')[0];
    const paint = name => (performance.getEntriesByName(name)[0] || {}).startTime || 0;
    return {
        loadTime: navigation ? Math.max(0, navigation.loadEventEnd - navigation.fetchStart) : 0,
        domContentLoaded: navigation
            ? Math.max(0, navigation.domContentLoadedEventEnd - navigation.fetchStart)
            : 0,
        firstPaint: paint('first-paint'),
        firstContentfulPaint: paint('first-contentful-paint')
    };
}"""

SECURITY_PROBE = """() => {
    const secure = location.protocol === 'https:';
    const sources = Array.from(document.querySelectorAll('[src], link[href]'))
        .map(el => el.getAttribute('src') || el.getAttribute('href') || '');
    return {
        isHttps: secure,
        insecureResources: secure ? sources.filter(src => src.startsWith('http:')).length : 0,
        passwordFieldsOnHttp: secure ? 0 : document.querySelectorAll('input[type=password]').length,
        unsafeBlankTargets: Array.from(document.querySelectorAll('a[target=_blank]'))
            .filter(a => !/noopener|noreferrer/.test(a.getAttribute('rel') || '')).length,
        inlineScripts: document.querySelectorAll('script:not([src])').length,
        deprecatedElements: document.querySelectorAll('font, center, marquee, blink, frame').length,
        hasLang: !!document.documentElement.getAttribute('lang')
    };
}"""

COMPLIANCE_PROBE = """() => {
    const fields = Array.from(document.querySelectorAll('input:not([type=hidden]), select, textarea'));
    const labelled = fields.filter(field =>
        (field.id && document.querySelector(`label[for="${field.id}"]`)) ||
        field.closest('label') ||
        field.getAttribute('aria-label') ||
        field.getAttribute('aria-labelledby')
    ).length;
    return {
        lang: document.documentElement.getAttribute('lang') || '',
        formFields: fields.length,
        labelledFields: labelled,
        hasViewportMeta: !!document.querySelector('meta[name=viewport]')
    };
}"""

__all__ = [
    "BASIC_ELEMENTS",
    "COMPLIANCE_PROBE",
    "HEADING_STRUCTURE",
    "IMAGE_ALT_STATS",
    "NAVIGATION_LOAD_TIME",
    "PAGE_TITLE",
    "PERFORMANCE_METRICS",
    "SECURITY_PROBE",
]
