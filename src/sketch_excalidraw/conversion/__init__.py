"""CSV parsing, document assembly, JSON repair, and the pipeline that sequences them.

Submodules:
  coercion    -- column-name to coercion-rule table and coercion helpers
  rows        -- one CSV row -> one element record
  schema      -- SceneDocument / AppState Pydantic models
  document    -- full CSV text -> SceneDocument
  repair      -- bounded validate-repair loop over the repair model
  transforms  -- collaborator protocols and the image payload
  errors      -- exception taxonomy and the fallback event
  pipeline    -- four-stage controller and run result
"""
