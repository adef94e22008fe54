"""Security headers (secure_headers) and rate limiting (rack-attack)."""

from __future__ import annotations

from railstarter.core.engine.installer import FeatureInstaller, Placement, gems
from railstarter.core.models.feature import MarkerRule
from railstarter.core.models.manifest import DEV_GROUP

RACK_ATTACK = "config/initializers/rack_attack.rb"

SECURE_HEADERS_CONFIG = """\
SecureHeaders::Configuration.default do |config|
  config.csp = { default_src: %w('self') }
  config.hsts = "max-age=#{1.year.to_i}; includeSubDomains"
  config.x_frame_options = "DENY"
  config.x_content_type_options = "nosniff"
  config.x_xss_protection = "1; mode=block"
  config.x_permitted_cross_domain_policies = "none"
  config.referrer_policy = %w(strict-origin-when-cross-origin)
end
"""

RACK_ATTACK_CONFIG = """\
class Rack::Attack
  # Throttle login attempts (brute force protection)
  throttle("req/ip login", limit: 5, period: 1.minute) do |req|
    req.ip if req.path == "/users/sign_in" && req.post?
  end

  # Throttle API requests
  throttle("req/ip api", limit: 100, period: 1.minute) do |req|
    req.ip if req.path.start_with?("/api")
  end

  # Block obvious bad bots
  blocklist("bad bots") do |req|
    req.user_agent.to_s.downcase.match?(/\\b(ahrefs|semrush|mj12bot)\\b/)
  end
end
"""


class SecurityInstaller(FeatureInstaller):
    key = "security"
    title = "Security headers and rate limiting"
    commit_message = "feat: install security."
    trigger = "secure_headers"
    marker = MarkerRule(
        manifest_all_of=["secure_headers", "rack-attack"],
        files_all_of=[RACK_ATTACK],
    )
    dependencies = (
        Placement(deps=gems("secure_headers", "rack-attack"), before=DEV_GROUP),
    )

    def write_artifacts(self) -> None:
        t = self.toolkit
        t.write_file("config/initializers/secure_headers.rb", SECURE_HEADERS_CONFIG)
        t.write_file(RACK_ATTACK, RACK_ATTACK_CONFIG)
        self.notice("Rate limiting: 5 logins/min/IP, 100 API calls/min/IP")
